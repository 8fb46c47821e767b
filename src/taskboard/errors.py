"""Application error taxonomy.

Every error the API deliberately returns is an AppError subclass. Each
carries the HTTP status it maps to, a human-readable message, and optional
field-level details. main.py registers one exception handler for AppError,
so services raise these and routes never build error responses by hand.

Anything that is NOT an AppError is treated as a bug: logged server-side
and returned as a generic 500.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[list[dict[str, Any]]] = None,
    ):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    status_code = 400
    message = "Invalid data"


class Unauthorized(AppError):
    status_code = 401
    message = "Authentication required"


class Forbidden(AppError):
    status_code = 403
    message = "Access denied. Administrators only."


class NotFound(AppError):
    status_code = 404
    message = "Not found"


class Conflict(AppError):
    """State conflict. Status depends on the case (see subclasses)."""

    status_code = 400
    message = "Conflict"


class InternalError(AppError):
    status_code = 500
    message = "Internal server error"


# ─── Auth flow ──────────────────────────────────────────


class InvalidCredentials(Unauthorized):
    # Same message for unknown email and wrong password.
    message = "Invalid email or password"


class MissingToken(Unauthorized):
    message = "Refresh token missing"


class InvalidOrExpiredToken(Unauthorized):
    message = "Invalid or expired token"


class RevokedToken(Unauthorized):
    message = "Refresh token revoked"


class DuplicateEmail(Conflict):
    status_code = 400
    message = "Email already registered"


class LastAdmin(Conflict):
    status_code = 403
    message = "Cannot delete the last administrator"
