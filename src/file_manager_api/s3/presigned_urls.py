"""Presigned URLs let the browser talk to the bucket directly, without proxying bytes."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from file_manager_api.keys import base_name
from file_manager_api.s3.client import get_s3_client
from file_manager_api.schemas import PresignedUrlResponse

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)

DEFAULT_PRESIGNED_URL_EXPIRY = 3600  # 1 hour


def _check_expiry(expires_in: int) -> None:
    if expires_in <= 0:
        raise ValueError("expires_in must be greater than zero")


def generate_upload_url(
    bucket_name: str,
    object_key: str,
    content_type: Optional[str] = None,
    expires_in: int = DEFAULT_PRESIGNED_URL_EXPIRY,
    s3_client: Optional["S3Client"] = None,
) -> PresignedUrlResponse:
    """
    Generate a presigned PUT URL.

    When `content_type` is given it is part of the signature, so the upload
    must send the same Content-Type header.
    """
    _check_expiry(expires_in)
    s3_client = s3_client or get_s3_client()

    params = {"Bucket": bucket_name, "Key": object_key}
    if content_type:
        params["ContentType"] = content_type

    url = s3_client.generate_presigned_url(
        ClientMethod="put_object",
        Params=params,
        ExpiresIn=expires_in,
    )
    logger.debug(f"Generated presigned upload URL for s3://{bucket_name}/{object_key} (expires in {expires_in}s)")
    return PresignedUrlResponse(
        url=url,
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    )


def generate_download_url(
    bucket_name: str,
    object_key: str,
    expires_in: int = DEFAULT_PRESIGNED_URL_EXPIRY,
    as_attachment: bool = False,
    s3_client: Optional["S3Client"] = None,
) -> PresignedUrlResponse:
    """
    Generate a presigned GET URL.

    With `as_attachment`, browsers save the file under its own name instead of
    rendering it.
    """
    _check_expiry(expires_in)
    s3_client = s3_client or get_s3_client()

    params = {"Bucket": bucket_name, "Key": object_key}
    if as_attachment:
        params["ResponseContentDisposition"] = f'attachment; filename="{base_name(object_key)}"'

    url = s3_client.generate_presigned_url(
        ClientMethod="get_object",
        Params=params,
        ExpiresIn=expires_in,
    )
    logger.debug(f"Generated presigned download URL for s3://{bucket_name}/{object_key} (expires in {expires_in}s)")
    return PresignedUrlResponse(
        url=url,
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    )
