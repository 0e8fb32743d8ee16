"""Authentication dependencies and cookie helpers for FastAPI routes."""

from dataclasses import dataclass

from fastapi import HTTPException, Request, Response

from app.config import get_settings
from app.services.auth import SessionTokens
from app.services.jwt import TokenKind, get_token_issuer

ACCESS_COOKIE_NAME = "accessToken"
REFRESH_COOKIE_NAME = "refreshToken"


@dataclass
class CurrentUser:
    """Authenticated caller, taken from a verified access token."""

    user_id: int
    role: str


def get_access_token(request: Request) -> str | None:
    """Read the access token from the Authorization header, then the cookie."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return request.cookies.get(ACCESS_COOKIE_NAME)


def get_current_user(request: Request) -> CurrentUser:
    """Validate the access token. Raises 401 if missing or invalid."""
    token = get_access_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = get_token_issuer().decode(token, TokenKind.ACCESS)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return CurrentUser(user_id=int(payload["sub"]), role=payload.get("role", ""))


def set_auth_cookies(response: Response, tokens: SessionTokens) -> None:
    """Set the access and refresh token cookies."""
    settings = get_settings()
    response.set_cookie(
        key=ACCESS_COOKIE_NAME,
        value=tokens.access_token,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
        max_age=settings.JWT_ACCESS_EXPIRE_MINUTES * 60,
    )
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=tokens.refresh_token,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
        max_age=settings.JWT_REFRESH_EXPIRE_MINUTES * 60,
    )


def clear_auth_cookies(response: Response) -> None:
    """Clear both token cookies."""
    response.delete_cookie(key=ACCESS_COOKIE_NAME)
    response.delete_cookie(key=REFRESH_COOKIE_NAME)
