"""Request-scoped dependencies shared by the routers."""
from fastapi import Request

from file_manager_api.config.settings import Settings
from file_manager_api.errors import BucketNotAllowedError

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_s3_client(request: Request) -> "S3Client":
    """The S3 client created for this application in `create_app`."""
    return request.app.state.s3_client


def ensure_bucket_allowed(settings: Settings, bucket_name: str) -> None:
    """Raise when `bucket_name` is outside the configured allow-list."""
    if not settings.is_bucket_allowed(bucket_name):
        raise BucketNotAllowedError(bucket_name)
