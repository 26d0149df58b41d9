"""Domain exceptions and the FastAPI handlers that turn errors into JSON responses."""
import logging
from typing import List

import pydantic
from botocore.exceptions import BotoCoreError, ClientError, ParamValidationError
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class FileManagerError(Exception):
    """Base class for errors raised by the S3 adapter."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidKeyError(FileManagerError, ValueError):
    """A key, folder path or display name cannot be used."""


class BucketNotAllowedError(FileManagerError):
    """The bucket is outside the configured allow-list."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, bucket_name: str):
        super().__init__(f"Access to bucket '{bucket_name}' is not allowed")
        self.bucket_name = bucket_name


class ObjectTooLargeError(FileManagerError):
    """The object is too large to be previewed inline."""

    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE

    def __init__(self, key: str, size: int, max_bytes: int):
        super().__init__(f"Object '{key}' is {size} bytes, preview limit is {max_bytes} bytes")
        self.key = key
        self.size = size
        self.max_bytes = max_bytes


class DeleteObjectsError(FileManagerError):
    """A batch delete reported per-key failures."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, failed_keys: List[str]):
        preview = ", ".join(failed_keys[:5])
        more = f" and {len(failed_keys) - 5} more" if len(failed_keys) > 5 else ""
        super().__init__(f"Failed to delete {len(failed_keys)} object(s): {preview}{more}")
        self.failed_keys = failed_keys


NOT_FOUND_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}
FORBIDDEN_CODES = {"403", "AccessDenied", "Forbidden", "AllAccessDisabled"}


def client_error_status(exc: ClientError) -> int:
    """HTTP status for an error reported by the object store."""
    code = exc.response.get("Error", {}).get("Code", "")
    if code in NOT_FOUND_CODES:
        return status.HTTP_404_NOT_FOUND
    if code in FORBIDDEN_CODES:
        return status.HTTP_403_FORBIDDEN
    return status.HTTP_502_BAD_GATEWAY


def client_error_message(exc: ClientError) -> str:
    error = exc.response.get("Error", {})
    if client_error_status(exc) == status.HTTP_404_NOT_FOUND:
        return "Not found"
    return error.get("Message") or error.get("Code") or "Object storage request failed"


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Invalid request",
            "detail": [
                {
                    "msg": error["msg"],
                    "input": error.get("input"),
                }
                for error in errors
            ],
        },
    )


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed requests (missing bucket, unknown action, ...) are client errors."""
    errors = exc.errors()
    message = "; ".join(_describe_validation_error(error) for error in errors) or "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message},
    )


def _describe_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
    msg = error.get("msg", "invalid value")
    return f"{location}: {msg}" if location else msg


async def handle_http_exceptions(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render `HTTPException`s with the same `{"error": ...}` body as every other error."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def handle_file_manager_errors(request: Request, exc: FileManagerError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


async def handle_s3_client_errors(request: Request, exc: ClientError) -> JSONResponse:
    status_code = client_error_status(exc)
    if status_code == status.HTTP_502_BAD_GATEWAY:
        logger.error(f"{request.method} {request.url.path} failed in object storage: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    return JSONResponse(status_code=status_code, content={"error": client_error_message(exc)})


async def handle_param_validation_errors(request: Request, exc: ParamValidationError) -> JSONResponse:
    """Parameters botocore refuses to send, e.g. an empty key, are client errors."""
    logger.warning(f"{request.method} {request.url.path} rejected before reaching object storage: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid object storage request"},
    )


async def handle_botocore_errors(request: Request, exc: BotoCoreError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} could not reach object storage: {exc}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"error": "Object storage is unavailable"},
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that propagates out of the route handlers."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )
