import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PicBedError(Exception):
    """Base error carrying the HTTP status and the message safe to show a client."""

    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.public_message
        super().__init__(self.message)


class ValidationError(PicBedError):
    status_code = 400
    public_message = "Invalid request"


class QuotaError(PicBedError):
    status_code = 400
    public_message = "Upload limit reached"


class AuthError(PicBedError):
    status_code = 401
    public_message = "Invalid or expired token"


class PermissionDeniedError(PicBedError):
    status_code = 403
    public_message = "Permission denied"


class NotFoundError(PicBedError):
    status_code = 404
    public_message = "Not found"


class StorageError(PicBedError):
    """Blob backend failure. The message is logged, never returned."""

    status_code = 500


class DecodeError(PicBedError):
    """Raised when the uploaded bytes cannot be decoded as an image."""

    status_code = 400
    public_message = "Invalid image file"


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }


async def picbed_exception_handler(request: Request, exc: PicBedError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        message = PicBedError.public_message
    else:
        message = exc.message
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(message, exc.status_code)
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # Convert 403 from HTTPBearer to 401 for missing authentication
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(
            status_code=401,
            content=create_error_response("Authentication required", 401)
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )
