import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """
    Base class for every failure that is reported to the caller.
    The message is client-safe; anything internal stays in the logs.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class InvalidRequest(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class PayloadTooLarge(ServiceError):
    # 400, not 413
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, limit_bytes: int, total_bytes: int):
        self.limit_bytes = limit_bytes
        self.total_bytes = total_bytes
        limit_mb = limit_bytes // (1024 * 1024)
        super().__init__(f"Total file size too large. Maximum is {limit_mb}MB.")


class UnsupportedFileType(InvalidRequest):
    def __init__(self, file_name: str, index: int):
        self.file_name = file_name
        self.index = index
        super().__init__(f"Unsupported file type: {file_name}. Allowed: PDF, Word, Images.")


class StorageWriteFailed(ServiceError):
    message = "Failed to upload file to storage"

    def __init__(self, file_name: str, index: int, cause: Exception | None = None):
        self.file_name = file_name
        self.index = index
        self.cause = cause
        super().__init__()


class UnexpectedError(ServiceError):
    pass


class ServiceNotConfigured(ServiceError):
    message = "AI service not configured"


class UpstreamServiceError(ServiceError):
    message = "Failed to get AI response"


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Renders every failure as {"error": "<message>"}."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        logger.warning(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.warning(f"{request.method} {request.url.path} invalid body: {exc.errors()}")
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        # Framework-level rejections, e.g. a multipart body without a boundary
        logger.warning(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.detail}")
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred")
