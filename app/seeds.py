"""Startup seeding of the bootstrap administrator."""

import logging

from sqlalchemy.orm import Session

from app.config import Settings
from app.models.user import User, UserRole
from app.services.hashing import SecretHasher, get_hasher
from app.services.identifiers import normalize_email, normalize_phone
from app.services.users import get_user_directory

logger = logging.getLogger("talent_onboarding")


def seed_admin(db: Session, settings: Settings, hasher: SecretHasher | None = None) -> User | None:
    """Create the configured administrator if it does not exist yet.

    Idempotent: an existing user with the admin email is returned untouched.
    Returns None when no admin credentials are configured.
    """
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin seed")
        return None

    email = normalize_email(settings.ADMIN_EMAIL)
    if not email:
        raise ValueError(f"ADMIN_EMAIL is not a valid email address: {settings.ADMIN_EMAIL!r}")
    phone_number = normalize_phone(settings.ADMIN_PHONE or "")
    if not phone_number:
        raise ValueError(f"ADMIN_PHONE is not a valid phone number: {settings.ADMIN_PHONE!r}")

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        return existing

    hasher = hasher or get_hasher()
    admin = get_user_directory().create(
        db,
        email=email,
        phone_number=phone_number,
        password_hash=hasher.hash(settings.ADMIN_PASSWORD),
        first_name=settings.ADMIN_FIRST_NAME,
        last_name=settings.ADMIN_LAST_NAME,
        role=UserRole.ADMIN,
        is_verified=True,
        is_active=True,
    )
    db.commit()
    logger.info("Seeded admin user %s", admin.id)
    return admin
