"""JWT access and refresh token issuing."""

import enum
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from jose import JWTError, jwt

from app.config import Settings, get_settings
from app.errors import Unauthorized


class TokenKind(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass
class TokenClaims:
    """Verified contents of a token."""

    user_id: int
    role: str
    kind: TokenKind
    expires_at: datetime


class TokenIssuer:
    """Signs and verifies access and refresh tokens.

    Each kind has its own secret and lifetime, so a refresh token is never
    accepted where an access token is expected and vice versa. Revocation of
    refresh tokens is handled by the stored digest on the user, not here.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.algorithm = settings.JWT_ALGORITHM
        self.secrets = {
            TokenKind.ACCESS: settings.JWT_ACCESS_SECRET_KEY,
            TokenKind.REFRESH: settings.JWT_REFRESH_SECRET_KEY,
        }
        self.lifetimes = {
            TokenKind.ACCESS: timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES),
            TokenKind.REFRESH: timedelta(minutes=settings.JWT_REFRESH_EXPIRE_MINUTES),
        }

    def _issue(self, user_id: int, role: str, kind: TokenKind) -> str:
        now = datetime.utcnow()
        payload = {
            "sub": str(user_id),
            "role": role,
            "type": kind.value,
            "iat": now,
            "exp": now + self.lifetimes[kind],
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, self.secrets[kind], algorithm=self.algorithm)

    def issue_access(self, user_id: int, role: str) -> str:
        return self._issue(user_id, role, TokenKind.ACCESS)

    def issue_refresh(self, user_id: int, role: str) -> str:
        return self._issue(user_id, role, TokenKind.REFRESH)

    def decode(self, token: str, kind: TokenKind) -> dict | None:
        """Decode and validate a token. Returns None if invalid."""
        try:
            payload = jwt.decode(token, self.secrets[kind], algorithms=[self.algorithm])
        except JWTError:
            return None
        if payload.get("type") != kind.value or "sub" not in payload:
            return None
        return payload

    def verify(self, token: str, kind: TokenKind) -> TokenClaims:
        """Verify a token of the given kind. Raises Unauthorized if invalid."""
        payload = self.decode(token, kind)
        if payload is None:
            raise Unauthorized()
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise Unauthorized() from None
        return TokenClaims(
            user_id=user_id,
            role=payload.get("role", ""),
            kind=kind,
            expires_at=datetime.utcfromtimestamp(payload["exp"]),
        )


_token_issuer: TokenIssuer | None = None


def get_token_issuer() -> TokenIssuer:
    """Get singleton token issuer instance."""
    global _token_issuer
    if _token_issuer is None:
        _token_issuer = TokenIssuer()
    return _token_issuer
