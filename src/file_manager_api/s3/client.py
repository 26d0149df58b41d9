"""S3 client construction and the process-wide shared client."""
import logging
from typing import Optional

import boto3
from botocore.config import Config

from file_manager_api.config.settings import Settings, get_settings

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)


class S3ClientManager:
    """Singleton manager for the S3 client built from settings."""
    _instance = None
    _client = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(S3ClientManager, cls).__new__(cls)
        return cls._instance

    def get_client(self, settings: Optional[Settings] = None) -> "S3Client":
        """Get or create the shared S3 client."""
        if self._client is None:
            self._client = create_s3_client(settings or get_settings())
        return self._client

    def clear_client(self) -> None:
        """Drop the cached client so the next call rebuilds it from settings."""
        self._client = None
        logger.debug("Cleared cached S3 client")


def create_s3_client(settings: Settings) -> "S3Client":
    """Create an S3 client for AWS or any S3-compatible endpoint.

    Credentials fall back to boto3's default chain when they are not set.
    """
    client_kwargs = {
        'region_name': settings.s3_region,
        'config': Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path' if settings.s3_force_path_style else 'auto'},
        ),
    }
    if settings.s3_endpoint_url:
        client_kwargs['endpoint_url'] = settings.s3_endpoint_url
    if settings.s3_access_key_id:
        client_kwargs['aws_access_key_id'] = settings.s3_access_key_id
    if settings.s3_secret_access_key:
        client_kwargs['aws_secret_access_key'] = settings.s3_secret_access_key

    logger.info(
        f"Creating S3 client (region={settings.s3_region}, "
        f"endpoint={settings.s3_endpoint_url or 'aws'}, "
        f"path_style={settings.s3_force_path_style})"
    )
    return boto3.client('s3', **client_kwargs)


def get_s3_client() -> "S3Client":
    """Get the shared S3 client."""
    return S3ClientManager().get_client()
