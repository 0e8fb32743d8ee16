"""Pytest configuration and fixtures."""

import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_ACCESS_SECRET_KEY"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET_KEY"] = "test-refresh-secret"
os.environ["EMAIL_SERVICE_ENABLED"] = "false"
os.environ["SMS_SERVICE_ENABLED"] = "false"
os.environ.pop("ADMIN_EMAIL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.config import Settings  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.models.user import User  # noqa: E402
from app.models.verification_code import VerificationCode  # noqa: E402
from app.seeds import seed_admin  # noqa: E402
from app.services.auth import AuthService, RegistrationData, get_auth_service  # noqa: E402
from app.services.dispatch import ChannelDispatcher  # noqa: E402
from app.services.hashing import SecretHasher  # noqa: E402
from app.services.jwt import TokenIssuer  # noqa: E402
from app.services.users import UserDirectory  # noqa: E402
from app.services.verification import VerificationCodeStore  # noqa: E402

PASSWORD = "Abcd1234"


class RecordingEmailSender:
    """Email sender that keeps messages in memory."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail = False

    def send(self, to: str, subject: str, html: str, text: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP relay unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})


class RecordingSmsSender:
    """SMS sender that keeps messages in memory."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail = False

    def send(self, to: str, body: str) -> None:
        if self.fail:
            raise ConnectionError("SMS provider unavailable")
        self.sent.append({"to": to, "body": body})


class ScriptedGenerator:
    """Code generator that returns a fixed sequence of codes."""

    def __init__(self, codes: list[str]) -> None:
        self.codes = iter(codes)

    def generate(self) -> str:
        return next(self.codes)


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="settings")
def settings_fixture() -> Settings:
    """Fresh settings instance; attributes may be overridden per test."""
    return Settings()


@pytest.fixture(name="email_sender")
def email_sender_fixture() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture(name="sms_sender")
def sms_sender_fixture() -> RecordingSmsSender:
    return RecordingSmsSender()


@pytest.fixture(name="hasher")
def hasher_fixture() -> SecretHasher:
    return SecretHasher(rounds=4)


@pytest.fixture(name="auth_service")
def auth_service_fixture(settings, hasher, email_sender, sms_sender) -> AuthService:
    """Auth service wired to in-memory senders and cheap hashing."""
    return AuthService(
        users=UserDirectory(),
        codes=VerificationCodeStore(lifetime_minutes=settings.VERIFICATION_CODE_EXPIRE_MINUTES),
        hasher=hasher,
        tokens=TokenIssuer(settings),
        dispatcher=ChannelDispatcher(email_sender=email_sender, sms_sender=sms_sender, settings=settings),
        settings=settings,
    )


@pytest.fixture(name="client")
def client_fixture(db_session: Session, auth_service: AuthService):
    """Create a test client with overridden DB and auth service dependencies."""
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register(auth_service: AuthService, db: Session, **overrides) -> User:
    data = {
        "email": "a@b.com",
        "phone_number": "+250788123456",
        "password": PASSWORD,
        "first_name": "Aline",
        "last_name": "Uwase",
    }
    data.update(overrides)
    return auth_service.register(db, RegistrationData(**data))


def code_for(db: Session, user_id: int) -> str:
    record = db.query(VerificationCode).filter(VerificationCode.user_id == user_id).one()
    return record.code


@pytest.fixture(name="pending_user")
def pending_user_fixture(db_session: Session, auth_service: AuthService) -> User:
    """Registered but not yet verified candidate."""
    return register(auth_service, db_session)


@pytest.fixture(name="verified_user")
def verified_user_fixture(db_session: Session, auth_service: AuthService, pending_user: User) -> User:
    """Registered and verified candidate, with no open session."""
    auth_service.verify(db_session, code_for(db_session, pending_user.id))
    auth_service.logout(db_session, pending_user.id)
    return pending_user


@pytest.fixture(name="admin_user")
def admin_user_fixture(db_session: Session, settings: Settings, hasher: SecretHasher) -> User:
    settings.ADMIN_EMAIL = "admin@example.com"
    settings.ADMIN_PASSWORD = "Admin1234"
    settings.ADMIN_PHONE = "+250788000001"
    return seed_admin(db_session, settings, hasher)
