"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import (
    REFRESH_COOKIE_NAME,
    CurrentUser,
    clear_auth_cookies,
    get_current_user,
    set_auth_cookies,
)
from app.schemas.auth import (
    ChangePasswordRequest,
    IdentifierRequest,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    SessionResponse,
    TokenResponse,
    UserResponse,
)
from app.services.auth import AuthService, LoginResult, Portal, RegistrationData, get_auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _session_response(message: str, result: LoginResult, response: Response) -> SessionResponse:
    """Build the body for endpoints that may open a session, setting cookies if so."""
    body = SessionResponse(message=message, user=UserResponse.model_validate(result.user))
    if result.tokens:
        set_auth_cookies(response, result.tokens)
        body.access_token = result.tokens.access_token
        body.refresh_token = result.tokens.refresh_token
    return body


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(
    body: RegisterRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """Register a candidate account. A verification code is sent on the chosen channel."""
    user = auth_service.register(db, RegistrationData(**body.model_dump()))
    return RegisterResponse(
        message=f"Registered successfully. Check your {body.verify_by.value} for a verification code.",
        user=UserResponse.model_validate(user),
    )


@router.get("/verify", response_model=SessionResponse)
def verify(
    code: str,
    response: Response,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    """Verify an account with the code it was sent."""
    result = auth_service.verify(db, code)
    return _session_response("Account verified successfully", result, response)


@router.post("/candidate-login", response_model=SessionResponse)
def candidate_login(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    """Sign in to the candidate portal with an email address or phone number."""
    result = auth_service.login(db, body.username, body.password, Portal.CANDIDATE)
    return _session_response("Login successfully", result, response)


@router.post("/admin-login", response_model=SessionResponse)
def admin_login(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    """Sign in to the staff portal."""
    result = auth_service.login(db, body.username, body.password, Portal.ADMIN)
    return _session_response("Login successfully", result, response)


@router.post("/refresh-token", response_model=TokenResponse)
def refresh_token(
    request: Request,
    response: Response,
    body: RefreshRequest | None = None,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Exchange a refresh token (body or cookie) for a new token pair."""
    token = (body.refresh_token if body else None) or request.cookies.get(REFRESH_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    tokens = auth_service.refresh(db, token)
    set_auth_cookies(response, tokens)
    return TokenResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Revoke the refresh token and clear the token cookies."""
    auth_service.logout(db, user.user_id)
    clear_auth_cookies(response)
    return MessageResponse(message="Logout successfully")


@router.get("/me", response_model=UserResponse)
def me(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Return the signed-in user."""
    return UserResponse.model_validate(auth_service.get_user(db, user.user_id))


@router.post("/request-verification-code", response_model=MessageResponse)
def request_verification_code(
    body: IdentifierRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Send a new verification code to an unverified account."""
    auth_service.request_verification(db, body.username)
    return MessageResponse(message="Verification code sent")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    body: IdentifierRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Send a password reset code."""
    auth_service.forgot_password(db, body.username)
    return MessageResponse(message="Reset code sent")


@router.patch("/reset-password", response_model=MessageResponse)
def reset_password(
    body: ResetPasswordRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Set a new password using a reset code."""
    auth_service.reset_password(db, body.code, body.new_password)
    return MessageResponse(message="Password reset successfully")


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Change the signed-in user's password."""
    auth_service.change_password(db, user.user_id, body.current_password, body.new_password)
    return MessageResponse(message="Password has changed successfully")
