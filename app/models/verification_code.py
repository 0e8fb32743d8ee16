"""Verification code model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base


class VerificationCode(Base):
    """Single-use code proving control of an email address or phone number.

    Used both for account verification and for password reset. ``user_id`` is
    unique: a user has at most one outstanding code.
    """

    __tablename__ = "verification_code"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(32), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), unique=True, nullable=False)

    user = relationship("User")

    def is_expired(self, now: datetime | None = None) -> bool:
        """A code is valid only while ``now`` is strictly before ``expires_at``."""
        return (now or datetime.utcnow()) >= self.expires_at
