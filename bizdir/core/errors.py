"""Error taxonomy shared by routers and services.

Every class is an HTTPException with a fixed status code, so handlers can
raise them directly; the app-level exception handlers in bizdir.main render
them as {"error": <message>}.
"""

from fastapi import HTTPException, status


class DirectoryError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message)

    @property
    def message(self) -> str:
        return self.detail


class ValidationError(DirectoryError):
    """Missing or malformed client input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class InvalidCredentials(DirectoryError):
    """Login failure. Same message whether the account exists or the password is wrong."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"

    def __init__(self):
        super().__init__(self.default_message)


class Unauthenticated(DirectoryError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class Forbidden(DirectoryError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class NotFound(DirectoryError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(DirectoryError):
    # 400 rather than 409: clients already treat "already exists" as a form error
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class UpstreamError(DirectoryError):
    """External provider (OAuth, geocoder) failed or is not configured."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upstream service unavailable"


def describe_validation_errors(errors) -> str:
    """Collapse pydantic error dicts into one client-facing message (first error wins)."""
    if not errors:
        return ValidationError.default_message
    first = errors[0]
    msg = first.get("msg", ValidationError.default_message)
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path", "form")]
    if loc:
        return f"{'.'.join(loc)}: {msg}"
    return msg
