"""
CallBoard Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every error scenario the API reports.
Why:   Services raise domain errors; global handlers (registered in main.py)
       translate them into structured JSON responses with the right status code.
How:   Each exception class carries a message, an optional context dict, and
       class-level `status_code` / `error_code` used by the handlers.

Exception Hierarchy:
    CallBoardError (base)
    ├── ValidationError            → 400 Bad Request
    ├── MissingTokenError          → 400 Bad Request ("No token provided")
    ├── AuthenticationError        → 401 Unauthorized
    ├── ForbiddenError             → 403 Forbidden
    ├── NotFoundError              → 404 Not Found
    ├── ConflictError              → 409 Conflict
    ├── UnsupportedMediaTypeError  → 415 Unsupported Media Type
    ├── DatabaseError              → 500 Internal Server Error
    └── ImageHostError             → 503 Service Unavailable
"""

from typing import Any, Dict, Iterable, Mapping, Optional


class CallBoardError(Exception):
    """
    Base exception for all CallBoard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CallBoardError):
    """
    Raised when client input fails validation.

    When:    Missing/extra fields, wrong types, business rules such as the
             zero-price rule for the free category, missing images.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class MissingTokenError(CallBoardError):
    """A protected route was called without an Authorization bearer header."""

    status_code = 400
    error_code = "missing_token"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="No token provided", context=context)


class AuthenticationError(CallBoardError):
    """
    Raised when a bearer token cannot be verified.

    The message is deliberately uniform ("Unauthorized") whatever the cause:
    bad signature, malformed token or missing claims.
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(CallBoardError):
    """
    Raised when a request is understood but refused.

    When:    Wrong login credentials, favouriting twice, removing a favourite
             that is not there.
    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"


class NotFoundError(CallBoardError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into this
    exception so routes stay free of status-code logic.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        message: str = "The requested resource was not found",
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource:
            ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(CallBoardError):
    """Raised when a write collides with existing state (duplicate email)."""

    status_code = 409
    error_code = "conflict"


class UnsupportedMediaTypeError(CallBoardError):
    """An uploaded file is not an image."""

    status_code = 415
    error_code = "unsupported_media_type"

    def __init__(
        self,
        message: str = "Only image files are allowed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CallBoardError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. Details are
        logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ImageHostError(CallBoardError):
    """
    Raised when the external image host fails after all retries.

    HTTP:    503 Service Unavailable, with Retry-After when known.
    """

    status_code = 503
    error_code = "image_host_unavailable"

    def __init__(
        self,
        message: str = "Image hosting service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


# ══════════════════════════════════════════════════════════════════════════
# Validation message formatting
# ══════════════════════════════════════════════════════════════════════════

# Path/query/body prefixes that FastAPI prepends to error locations
_LOCATION_ROOTS = {"body", "query", "path", "header", "form"}

# Path parameters validated as identifiers
_ID_PARAMS = {"callId", "userId", "call_id", "user_id"}


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(p) for p in loc if str(p) not in _LOCATION_ROOTS]
    return ".".join(parts) if parts else "value"


def _format_bound(bound: Any) -> str:
    """Whole-number limits render without a decimal part: 0, not 0.0."""
    if isinstance(bound, float):
        return f"{bound:g}"
    return str(bound)


def describe_validation_error(error: Mapping[str, Any]) -> str:
    """
    Render one pydantic error entry as a short human sentence.

    Examples:
        {"type": "missing", "loc": ("body", "title")}     → '"title" is required'
        {"type": "extra_forbidden", "loc": ("extra",)}    → '"extra" is not allowed'
        {"type": "uuid_parsing", "loc": ("path", "callId")} → "Invalid 'callId'. Must be a UUID"
    """
    field = _field_name(error.get("loc", ()))
    kind = error.get("type", "")
    ctx = error.get("ctx") or {}

    if kind == "uuid_parsing" or (kind.startswith("uuid") and field in _ID_PARAMS):
        return f"Invalid '{field}'. Must be a UUID"
    if kind == "missing":
        return f'"{field}" is required'
    if kind == "extra_forbidden":
        return f'"{field}" is not allowed'
    if kind == "string_type":
        return f'"{field}" must be a string'
    if kind == "string_too_short":
        return f'"{field}" is not allowed to be empty'
    if kind in {"float_parsing", "float_type", "int_parsing", "int_type", "finite_number"}:
        return f'"{field}" must be a number'
    if kind in {"greater_than_equal", "greater_than"}:
        bound = ctx.get("ge", ctx.get("gt"))
        return f'"{field}" must be greater than or equal to {_format_bound(bound)}'
    if kind in {"less_than_equal", "less_than"}:
        bound = ctx.get("le", ctx.get("lt"))
        return f'"{field}" must be less than or equal to {_format_bound(bound)}'
    if kind in {"enum", "literal_error"}:
        expected = ctx.get("expected", "")
        return f'"{field}" must be one of [{expected}]'
    if kind == "value_error" and "email" in str(error.get("msg", "")).lower():
        return f'"{field}" must be a valid email'
    return f'"{field}" {error.get("msg", "is invalid")}'


def validation_error_from_errors(errors: Iterable[Mapping[str, Any]]) -> ValidationError:
    """Collapse pydantic/FastAPI error entries into a single ValidationError (first error wins)."""
    errors = list(errors)
    if not errors:
        return ValidationError()
    first = errors[0]
    return ValidationError(
        message=describe_validation_error(first),
        field=_field_name(first.get("loc", ())),
        context={"errors": [
            {"loc": [str(p) for p in e.get("loc", ())], "type": e.get("type")}
            for e in errors
        ]},
    )
