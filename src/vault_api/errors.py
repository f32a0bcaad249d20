"""Error taxonomy and the handlers that render errors as JSON."""

import logging
from typing import Optional

import pydantic
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vault_api.schemas import ErrorResponse, FileInfo

logger = logging.getLogger(__name__)


class FileStoreError(Exception):
    """Base class for errors raised while serving a file operation."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(FileStoreError):
    status_code = status.HTTP_400_BAD_REQUEST


class StoredFileNotFoundError(FileStoreError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "File not found"):
        super().__init__(message)


class DuplicateContentError(FileStoreError):
    """Identical content is already stored, under ``existing.key``."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, existing: FileInfo, message: str = "This file already exists in storage"):
        super().__init__(message)
        self.existing = existing


class InternalStoreError(FileStoreError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    @classmethod
    def from_exception(cls, exc: Exception, fallback: str) -> "InternalStoreError":
        """Wrap a store failure, keeping its message when it has one."""
        return cls(str(exc) or fallback)


def error_response(message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


async def handle_file_store_errors(request: Request, exc: FileStoreError) -> JSONResponse:
    if isinstance(exc, DuplicateContentError):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "message": exc.message,
                "file": exc.existing.model_dump(by_alias=True),
            },
        )
    return error_response(exc.message, exc.status_code)


async def handle_http_exceptions(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message: Optional[str] = exc.detail if isinstance(exc.detail, str) else None
    return error_response(message or "Request failed", exc.status_code)


async def handle_pydantic_validation_errors(
    request: Request, exc: RequestValidationError | pydantic.ValidationError
) -> JSONResponse:
    errors = exc.errors()
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return error_response("; ".join(messages) or "Invalid request", status.HTTP_400_BAD_REQUEST)


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that propagates during the request."""
    try:
        return await call_next(request)
    except Exception as e:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(str(e) or "Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
