import enum
import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    STORAGE = "storage"


class ImageStoreError(Exception):
    """Base class for every failure the image store reports on purpose."""

    kind: ErrorKind = ErrorKind.STORAGE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ImageStoreError):
    kind = ErrorKind.NOT_FOUND


class OriginalNotFoundError(NotFoundError):
    """The original needed to generate a resized variant does not exist."""


class StorageError(ImageStoreError):
    kind = ErrorKind.STORAGE


class GenerationError(StorageError):
    pass


class DecodeError(StorageError):
    pass


class EncodeError(StorageError):
    pass


class EmptyInputError(StorageError):
    pass


STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORAGE: 500,
}


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }


async def image_store_exception_handler(request: Request, exc: ImageStoreError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if exc.kind is ErrorKind.NOT_FOUND:
        logger.warning(f"Image not found: {exc.message}")
        message = exc.message
    else:
        logger.error(f"Storage failure on {request.url.path}: {exc.message}", exc_info=exc)
        message = "Failed to process image"
    return JSONResponse(
        status_code=status_code,
        content=create_error_response(message, status_code)
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )
