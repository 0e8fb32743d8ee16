"""User model."""

import enum
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from app.database import Base


class UserRole(str, enum.Enum):
    """Roles known to the login portals."""

    CANDIDATE = "candidate"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class User(Base):
    """Account holder: candidate or staff member."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(256), unique=True, nullable=False, index=True)
    phone_number = Column(String(32), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    first_name = Column(String(128), nullable=False)
    last_name = Column(String(128), nullable=False)
    role = Column(String(32), nullable=False, default=UserRole.CANDIDATE.value)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    last_login_at = Column(DateTime, nullable=True)
    refresh_token_hash = Column(String(256), nullable=True)
