"""Tests for the admin bootstrap."""

import pytest
from sqlalchemy.orm import Session

from app.config import Settings
from app.models.user import User
from app.seeds import seed_admin
from app.services.hashing import SecretHasher


def configure_admin(settings: Settings) -> Settings:
    settings.ADMIN_EMAIL = "Admin@Example.com"
    settings.ADMIN_PASSWORD = "Admin1234"
    settings.ADMIN_PHONE = "+250788000001"
    return settings


def test_seed_creates_verified_active_admin(db_session: Session, settings: Settings, hasher: SecretHasher):
    admin = seed_admin(db_session, configure_admin(settings), hasher)
    assert admin.email == "admin@example.com"
    assert admin.role == "admin"
    assert admin.is_verified is True
    assert admin.is_active is True
    assert hasher.verify("Admin1234", admin.password_hash)


def test_seed_is_idempotent(db_session: Session, settings: Settings, hasher: SecretHasher):
    configure_admin(settings)
    first = seed_admin(db_session, settings, hasher)
    second = seed_admin(db_session, settings, hasher)
    assert first.id == second.id
    assert db_session.query(User).count() == 1


def test_seed_skipped_without_credentials(db_session: Session, settings: Settings):
    settings.ADMIN_EMAIL = None
    settings.ADMIN_PASSWORD = None
    assert seed_admin(db_session, settings) is None
    assert db_session.query(User).count() == 0


def test_seed_rejects_invalid_phone(db_session: Session, settings: Settings, hasher: SecretHasher):
    configure_admin(settings)
    settings.ADMIN_PHONE = "12345"
    with pytest.raises(ValueError):
        seed_admin(db_session, settings, hasher)
