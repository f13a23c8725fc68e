import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DocChatException(Exception):
    """Base exception for DocChat API errors.

    `message` is what the client sees for 4xx errors. For 5xx errors the
    client gets `public_message` and the detail only goes to the logs.
    """

    public_message = "internal server error"

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationException(DocChatException):
    """Malformed input (400)."""

    def __init__(self, message: str):
        super().__init__(message=message, status_code=400)


class UnauthorizedException(DocChatException):
    """Authentication required or failed (401)."""

    def __init__(self, message: str = "authentication required"):
        super().__init__(message=message, status_code=401)


class NotFoundException(DocChatException):
    """Resource not found (404)."""

    def __init__(self, resource: str, resource_id: int | str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(message=f"{resource} not found", status_code=404)


class StoreException(DocChatException):
    """Database or transaction failure (500). The transaction is already rolled back."""

    def __init__(self, message: str):
        super().__init__(message=message, status_code=500)


class UpstreamException(DocChatException):
    """Embedding or chat provider failure (502). Not retried."""

    public_message = "upstream service error"

    def __init__(self, message: str):
        super().__init__(message=message, status_code=502)


async def docchat_exception_handler(request: Request, exc: DocChatException) -> JSONResponse:
    """Converts our exceptions into `{"message": ...}` JSON responses."""
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc,
        )
        message = exc.public_message
    else:
        message = exc.message

    headers = {"WWW-Authenticate": "Basic"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """FastAPI answers schema violations with 422; we answer 400 with a readable message."""
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        message = "invalid json"
    else:
        message = "; ".join(_format_error(err) for err in errors) or "invalid request"

    return JSONResponse(status_code=400, content={"message": message})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log everything, tell the client nothing."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "internal server error"})


def _format_error(err: dict) -> str:
    # Drop the "body"/"query"/"path" prefix, keep the field path
    location = ".".join(str(part) for part in err.get("loc", ())[1:])
    reason = err.get("msg", "invalid value")
    return f"{location}: {reason}" if location else reason
