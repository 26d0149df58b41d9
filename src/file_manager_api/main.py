from textwrap import dedent
import logging
import pydantic
from botocore.exceptions import BotoCoreError, ClientError, ParamValidationError
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from file_manager_api.errors import (
    FileManagerError,
    handle_botocore_errors,
    handle_broad_exceptions,
    handle_file_manager_errors,
    handle_http_exceptions,
    handle_param_validation_errors,
    handle_pydantic_validation_errors,
    handle_request_validation_errors,
    handle_s3_client_errors,
)
from file_manager_api.routers.buckets import router as buckets_router
from file_manager_api.routers.objects import router as objects_router
from file_manager_api.routers.presigned import router as presigned_router
from file_manager_api.routers.upload import router as upload_router
from file_manager_api.routers.health import router as health_router
from file_manager_api.config.settings import Settings, get_settings
from file_manager_api.s3.client import create_s3_client
from file_manager_api.utils.logging import configure_logging

# Set up logging
logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, s3_client=None) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="File Manager API",
        summary="Browse and manage objects in S3-compatible buckets",
        version="v1",
        description=dedent(
            """\
        Folder-style access to S3-compatible object storage.

        | Helpful Links | Notes |
        | --- | --- |
        | [FastAPI Documentation](https://fastapi.tiangolo.com/) | |
        | [Amazon S3 API Reference](https://docs.aws.amazon.com/AmazonS3/latest/API/Welcome.html) | Every operation maps onto these calls |
        """
        ),
        docs_url="/",  # its easier to find the docs when they live on the base url
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.s3_client = s3_client or create_s3_client(settings)
    if not settings.auth_secret_key:
        logger.warning("AUTH_SECRET_KEY is not set; every authenticated request will be rejected")

    app.include_router(buckets_router, prefix="/v1", tags=["buckets"])
    app.include_router(objects_router, prefix="/v1", tags=["objects"])
    app.include_router(presigned_router, prefix="/v1", tags=["presigned"])
    app.include_router(upload_router, prefix="/v1", tags=["upload"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.add_exception_handler(RequestValidationError, handle_request_validation_errors)
    app.add_exception_handler(StarletteHTTPException, handle_http_exceptions)
    app.add_exception_handler(FileManagerError, handle_file_manager_errors)
    app.add_exception_handler(ClientError, handle_s3_client_errors)
    app.add_exception_handler(ParamValidationError, handle_param_validation_errors)
    app.add_exception_handler(BotoCoreError, handle_botocore_errors)
    app.middleware("http")(handle_broad_exceptions)

    logger.info(f"Created {settings.app_name} in {settings.deployment_mode} mode")
    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
