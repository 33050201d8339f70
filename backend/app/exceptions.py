import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.errors import ErrorType, ERROR_STATUS_MAP

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Custom exception that services can raise."""

    def __init__(self, error_type: ErrorType, message: str):
        self.error_type = error_type
        self.message = message
        super().__init__(message)


class NotFoundError(AppException):
    def __init__(self, message: str):
        super().__init__(ErrorType.NOT_FOUND, message)


class ValidationError(AppException):
    def __init__(self, message: str):
        super().__init__(ErrorType.VALIDATION, message)


class ConflictError(AppException):
    def __init__(self, message: str):
        super().__init__(ErrorType.CONFLICT, message)


class AuthenticationError(AppException):
    def __init__(self, message: str):
        super().__init__(ErrorType.AUTHENTICATION, message)


class StorageError(AppException):
    def __init__(self, message: str):
        super().__init__(ErrorType.STORAGE_FAILURE, message)


def error_body(message: str) -> dict:
    return {"success": False, "message": message}


async def app_exception_handler(_request: Request, exc: AppException) -> JSONResponse:
    """Global handler for AppException - converts to proper HTTP response."""
    status_code = ERROR_STATUS_MAP.get(exc.error_type, 500)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.message),
        headers=headers
    )


async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap framework HTTP errors (404 routes, 401 from security) in the envelope."""
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request body/query validation failures are reported as 400."""
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{location}: {err.get('msg')}" if location else err.get("msg", "invalid value"))
    return JSONResponse(
        status_code=400,
        content=error_body("; ".join(parts) or "Validation failed")
    )


async def generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Global handler for unhandled exceptions - returns 500."""
    logger.error(f"Unhandled exception: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_body("Internal server error")
    )
