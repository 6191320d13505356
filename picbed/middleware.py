import time
import uuid
import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from .core.config import settings

logger = logging.getLogger(__name__)

# Blob keys are never reused, so served image bytes never change
IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"
BODY_METHODS = ("POST", "PUT", "PATCH")


def _error_body(message: str) -> dict:
    return {"success": False, "data": None, "error": message}


class SecurityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        path = request.url.path
        image_paths = (f"{settings.API_PREFIX}/images/file/", f"{settings.API_PREFIX}/images/thumbnail/")
        if response.status_code == 200 and path.startswith(image_paths):
            response.headers["Cache-Control"] = IMMUTABLE_CACHE_CONTROL

        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and tags the response with a request id."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        client_host = request.client.host if request.client else "unknown"
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed_ms:.1f} ms, client {client_host})"
        )
        response.headers["X-Request-ID"] = request_id
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", "-")
            logger.error(f"[{request_id}] Unhandled error on {request.method} {request.url.path}: {e}",
                         exc_info=True)
            message = f"Internal server error: {e}" if settings.DEBUG else "Internal server error"
            return JSONResponse(status_code=500, content=_error_body(message))


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Hard cap from Content-Length; the upload pipeline still checks the file itself
        if request.method in BODY_METHODS:
            limit = settings.MAX_FILE_SIZE + settings.REQUEST_SIZE_SLACK
            try:
                size = int(request.headers.get("content-length", 0))
            except ValueError:
                size = 0
            if size > limit:
                logger.warning(f"Rejected {request.method} {request.url.path}: {size} bytes exceeds {limit}")
                return JSONResponse(status_code=413, content=_error_body("Request entity too large"))
        return await call_next(request)
