"""Error kinds raised by the credential and verification services.

Every failure of an auth operation is an ``AuthError`` subclass. The HTTP
layer maps them to responses through a single exception handler using
``status_code`` and ``detail``.
"""


class AuthError(Exception):
    """Base class for classified auth failures."""

    status_code: int = 400
    detail: str = "Authentication error"

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)

    @property
    def code(self) -> str:
        """Stable machine-readable error name."""
        return type(self).__name__


class InvalidIdentifier(AuthError):
    status_code = 400
    detail = "Please use either an email address or a phone number"


class AlreadyExists(AuthError):
    status_code = 409
    detail = "An account with this email or phone number already exists"


class NotFound(AuthError):
    status_code = 404
    detail = "User not found"


class InvalidCode(AuthError):
    status_code = 401
    detail = "Invalid verification code"


class CodeExpired(AuthError):
    status_code = 401
    detail = "Verification code has expired. Please request a new one."


class InvalidCredential(AuthError):
    status_code = 401
    detail = "Invalid credentials"


class AlreadyVerified(AuthError):
    status_code = 400
    detail = "Account is already verified"


class Unverified(AuthError):
    status_code = 403
    detail = "Account is not verified"


class Dormant(AuthError):
    status_code = 403
    detail = "Account is in dormant mode"


class Forbidden(AuthError):
    status_code = 403
    detail = "You have no access to this portal"


class SamePassword(AuthError):
    status_code = 400
    detail = "New password must differ from the current password"


class Unauthorized(AuthError):
    status_code = 401
    detail = "Invalid or expired token"


class DispatchFailed(AuthError):
    """The code was stored but could not be delivered. Safe to request again."""

    status_code = 502
    detail = "Could not deliver the code. Please request a new one."
