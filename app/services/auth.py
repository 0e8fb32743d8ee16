"""Authentication service: registration, verification, sessions and passwords."""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.errors import (
    AlreadyExists,
    AlreadyVerified,
    Dormant,
    Forbidden,
    InvalidCredential,
    InvalidIdentifier,
    NotFound,
    SamePassword,
    Unauthorized,
    Unverified,
)
from app.models.user import User, UserRole
from app.services.dispatch import ChannelDispatcher, Purpose, get_dispatcher
from app.services.hashing import SecretHasher, get_hasher
from app.services.identifiers import Channel, normalize_email, normalize_phone, parse_identifier
from app.services.jwt import TokenIssuer, TokenKind, get_token_issuer
from app.services.users import UserDirectory, get_user_directory
from app.services.verification import VerificationCodeStore, get_code_store

logger = logging.getLogger("talent_onboarding")


class Portal(str, enum.Enum):
    """Login surface. Candidates and staff sign in through different portals."""

    CANDIDATE = "candidate"
    ADMIN = "admin"

    def admits(self, role: str) -> bool:
        is_candidate = role == UserRole.CANDIDATE.value
        return is_candidate if self is Portal.CANDIDATE else not is_candidate


@dataclass
class RegistrationData:
    email: str
    phone_number: str
    password: str
    first_name: str
    last_name: str
    verify_by: Channel = Channel.EMAIL


@dataclass
class SessionTokens:
    access_token: str
    refresh_token: str


@dataclass
class LoginResult:
    """Outcome of a successful login or verification.

    ``tokens`` is None when a verified account is dormant and therefore gets
    no session.
    """

    user: User
    tokens: SessionTokens | None


class AuthService:
    """Orchestrates the credential, verification and session lifecycle.

    Every operation commits at most once for its state change. Codes are
    committed before they are dispatched, so a delivery failure never undoes
    an account or code change.
    """

    def __init__(
        self,
        users: UserDirectory | None = None,
        codes: VerificationCodeStore | None = None,
        hasher: SecretHasher | None = None,
        tokens: TokenIssuer | None = None,
        dispatcher: ChannelDispatcher | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.users = users or get_user_directory()
        self.codes = codes or get_code_store()
        self.hasher = hasher or get_hasher()
        self.tokens = tokens or get_token_issuer()
        self.dispatcher = dispatcher or get_dispatcher()
        self.settings = settings or get_settings()
        self._dummy_digest: str | None = None

    # --- Registration and verification ---

    def register(self, db: Session, data: RegistrationData) -> User:
        """Create an unverified account and send it a verification code."""
        email = normalize_email(data.email)
        if not email:
            raise InvalidIdentifier("Invalid email address")
        phone_number = normalize_phone(data.phone_number)
        if not phone_number:
            raise InvalidIdentifier("Invalid phone number")

        password_hash = self.hasher.hash(data.password)

        if self.users.identifier_taken(db, email, phone_number):
            raise AlreadyExists()

        user = self.users.create(
            db,
            email=email,
            phone_number=phone_number,
            password_hash=password_hash,
            first_name=data.first_name,
            last_name=data.last_name,
            is_active=self.settings.ACCOUNTS_START_ACTIVE,
        )
        code = self.codes.stage(db, user).code
        db.commit()

        logger.info("Registered user %s, verifying by %s", user.id, data.verify_by.value)
        self.dispatcher.send_code(user, data.verify_by, code, Purpose.VERIFICATION)
        return user

    def verify(self, db: Session, code: str) -> LoginResult:
        """Consume a verification code and mark its owner verified.

        An active account is signed in as part of the same commit.
        """
        user = self.codes.consume(db, code)
        if user.is_verified:
            db.rollback()
            raise AlreadyVerified()

        user.is_verified = True
        if not self.settings.ACCOUNTS_START_ACTIVE:
            user.is_active = True

        tokens = None
        if user.is_active:
            tokens = self._issue_tokens(user)
            user.last_login_at = datetime.utcnow()
        db.commit()

        logger.info("Verified user %s", user.id)
        return LoginResult(user=user, tokens=tokens)

    def request_verification(self, db: Session, identifier: str) -> None:
        """Send a fresh verification code to an unverified account."""
        parsed = parse_identifier(identifier)
        user = self.users.find_by_identifier(db, parsed)
        if user is None:
            raise NotFound()
        if user.is_verified:
            raise AlreadyVerified()
        self._send_new_code(db, user, parsed.channel, Purpose.VERIFICATION)

    # --- Sessions ---

    def login(self, db: Session, identifier: str, password: str, portal: Portal = Portal.CANDIDATE) -> LoginResult:
        """Authenticate through a portal and open a session.

        Unknown identifiers and wrong passwords fail identically. Role,
        verification and activity are checked only once the password matched.
        """
        parsed = parse_identifier(identifier)
        user = self.users.find_by_identifier(db, parsed)

        if user is None:
            self.hasher.verify(password, self._get_dummy_digest())
            logger.warning("Failed %s login: unknown %s", portal.value, parsed.channel.value)
            raise InvalidCredential()
        if not self.hasher.verify(password, user.password_hash):
            logger.warning("Failed %s login for user %s: wrong password", portal.value, user.id)
            raise InvalidCredential()

        if not portal.admits(user.role):
            logger.warning("User %s with role %s refused at %s portal", user.id, user.role, portal.value)
            raise Forbidden()
        if not user.is_verified:
            raise Unverified()
        if not user.is_active:
            raise Dormant()

        tokens = self._issue_tokens(user)
        user.last_login_at = datetime.utcnow()
        db.commit()

        logger.info("User %s logged in at %s portal", user.id, portal.value)
        return LoginResult(user=user, tokens=tokens)

    def refresh(self, db: Session, refresh_token: str) -> SessionTokens:
        """Exchange a live refresh token for a new access and refresh token.

        The presented token must verify and match the stored digest. The
        digest is replaced, so each refresh token is usable once.
        """
        claims = self.tokens.verify(refresh_token, TokenKind.REFRESH)
        user = self.users.get(db, claims.user_id)
        if user is None or not self.hasher.verify(refresh_token, user.refresh_token_hash):
            logger.warning("Rejected refresh token for user %s", claims.user_id)
            raise Unauthorized()
        if not user.is_active:
            raise Unauthorized()

        tokens = self._issue_tokens(user)
        db.commit()
        return tokens

    def logout(self, db: Session, user_id: int) -> None:
        """Revoke the user's refresh token. Safe to call repeatedly."""
        user = self.users.get(db, user_id)
        if user is None or user.refresh_token_hash is None:
            return
        user.refresh_token_hash = None
        db.commit()
        logger.info("User %s logged out", user_id)

    # --- Passwords ---

    def change_password(self, db: Session, user_id: int, current_password: str, new_password: str) -> User:
        """Replace the password after checking the current one."""
        user = self.users.get(db, user_id)
        if user is None:
            raise NotFound()
        if new_password == current_password:
            raise SamePassword()
        if not self.hasher.verify(current_password, user.password_hash):
            raise InvalidCredential("Current password is incorrect")

        user.password_hash = self.hasher.hash(new_password)
        db.commit()
        logger.info("User %s changed password", user.id)
        return user

    def forgot_password(self, db: Session, identifier: str) -> None:
        """Send a password reset code on the identifier's channel."""
        parsed = parse_identifier(identifier)
        user = self.users.find_by_identifier(db, parsed)
        if user is None:
            raise NotFound()
        self._send_new_code(db, user, parsed.channel, Purpose.PASSWORD_RESET)

    def reset_password(self, db: Session, code: str, new_password: str) -> User:
        """Consume a reset code and set a new password for its owner."""
        user = self.codes.consume(db, code)
        user.password_hash = self.hasher.hash(new_password)
        db.commit()
        logger.info("User %s reset password", user.id)
        return user

    def get_user(self, db: Session, user_id: int) -> User:
        user = self.users.get(db, user_id)
        if user is None:
            raise NotFound()
        return user

    # --- Helpers ---

    def _send_new_code(self, db: Session, user: User, channel: Channel, purpose: Purpose) -> None:
        code = self.codes.issue(db, user).code
        logger.info("Issued %s code for user %s", purpose.value, user.id)
        self.dispatcher.send_code(user, channel, code, purpose)

    def _issue_tokens(self, user: User) -> SessionTokens:
        access_token = self.tokens.issue_access(user.id, user.role)
        refresh_token = self.tokens.issue_refresh(user.id, user.role)
        user.refresh_token_hash = self.hasher.hash(refresh_token)
        return SessionTokens(access_token=access_token, refresh_token=refresh_token)

    def _get_dummy_digest(self) -> str:
        if self._dummy_digest is None:
            self._dummy_digest = self.hasher.hash("not-a-real-password")
        return self._dummy_digest


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
