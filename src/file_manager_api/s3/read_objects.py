"""Functions for reading objects from an S3 bucket--the "R" in CRUD."""

import logging
from typing import Iterator, List, Optional

from botocore.exceptions import ClientError

from file_manager_api.errors import ObjectTooLargeError
from file_manager_api.keys import (
    DELIMITER,
    base_name,
    breadcrumbs,
    display_name,
    normalize_prefix,
    parent_prefix,
)
from file_manager_api.s3.client import get_s3_client
from file_manager_api.schemas import (
    DEFAULT_LIST_OBJECTS_MAX_KEYS,
    Breadcrumb,
    Bucket,
    ListObjectsResponse,
    ObjectContentResponse,
    S3Object,
)
from file_manager_api.utils.decorators import log_execution_time

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)


@log_execution_time
def list_buckets(
    allowed_buckets: Optional[List[str]] = None,
    s3_client: Optional["S3Client"] = None,
) -> List[Bucket]:
    """
    List the buckets owned by the configured credentials.

    :param allowed_buckets: When given, only buckets with these names are returned.
    :param s3_client: An optional boto3 S3 client. If not provided, the shared one is used.
    """
    s3_client = s3_client or get_s3_client()
    response = s3_client.list_buckets()
    buckets = [
        Bucket(name=bucket["Name"], creation_date=bucket.get("CreationDate"))
        for bucket in response.get("Buckets", [])
    ]
    if allowed_buckets is not None:
        buckets = [bucket for bucket in buckets if bucket.name in allowed_buckets]
    return buckets


@log_execution_time
def list_objects(
    bucket_name: str,
    prefix: str = "",
    continuation_token: Optional[str] = None,
    max_keys: int = DEFAULT_LIST_OBJECTS_MAX_KEYS,
    s3_client: Optional["S3Client"] = None,
) -> ListObjectsResponse:
    """
    List one "folder" of a bucket: its subfolders first, then its files.

    :param bucket_name: The name of the S3 bucket.
    :param prefix: The folder to list. A trailing `/` is added when missing.
    :param continuation_token: Token from a previous truncated listing.
    :param max_keys: Page size passed to list-objects-v2.
    :param s3_client: An optional boto3 S3 client. If not provided, the shared one is used.
    """
    s3_client = s3_client or get_s3_client()
    normalized_prefix = normalize_prefix(prefix)

    list_params = {
        "Bucket": bucket_name,
        "Prefix": normalized_prefix,
        "Delimiter": DELIMITER,
        "MaxKeys": max_keys,
    }
    if continuation_token:
        list_params["ContinuationToken"] = continuation_token

    response = s3_client.list_objects_v2(**list_params)

    # the folder's own marker object is not a child of itself
    files = [
        S3Object(
            key=item["Key"],
            name=display_name(item["Key"], normalized_prefix),
            size=item.get("Size"),
            last_modified=item.get("LastModified"),
            etag=item.get("ETag"),
            is_folder=False,
        )
        for item in response.get("Contents", [])
        if item["Key"] != normalized_prefix
    ]
    prefixes = [common["Prefix"] for common in response.get("CommonPrefixes", [])]
    folders = [
        S3Object(key=folder, name=display_name(folder, normalized_prefix), is_folder=True)
        for folder in prefixes
    ]

    return ListObjectsResponse(
        objects=folders + files,
        prefixes=prefixes,
        is_truncated=response.get("IsTruncated", False),
        next_continuation_token=response.get("NextContinuationToken"),
        prefix=normalized_prefix,
        parent_prefix=parent_prefix(normalized_prefix) if normalized_prefix else None,
        breadcrumbs=[Breadcrumb(name=name, prefix=path) for name, path in breadcrumbs(bucket_name, normalized_prefix)],
    )


def iter_keys_under_prefix(
    bucket_name: str,
    prefix: str,
    s3_client: Optional["S3Client"] = None,
) -> Iterator[str]:
    """
    Yield every key below `prefix`, at any depth, including the folder marker itself.

    :param bucket_name: The name of the S3 bucket.
    :param prefix: Folder prefix; must not be empty so a bucket is never walked by accident.
    :param s3_client: An optional boto3 S3 client. If not provided, the shared one is used.
    """
    s3_client = s3_client or get_s3_client()
    paginator = s3_client.get_paginator("list_objects_v2")
    for page in paginator.paginate(Bucket=bucket_name, Prefix=prefix):
        for item in page.get("Contents", []):
            yield item["Key"]


def object_exists_in_s3(bucket_name: str, object_key: str, s3_client: Optional["S3Client"] = None) -> bool:
    """
    Check if an object exists in the S3 bucket using head_object.

    :param bucket_name: Name of the S3 bucket.
    :param object_key: Key of the object to check.
    :param s3_client: An optional boto3 S3 client. If not provided, the shared one is used.

    :return: True if the object exists, False otherwise.
    """
    s3_client = s3_client or get_s3_client()
    try:
        s3_client.head_object(Bucket=bucket_name, Key=object_key)
        return True
    except ClientError as err:
        error_code = err.response.get("Error", {}).get("Code")
        if error_code in ("404", "NoSuchKey", "NotFound"):
            return False
        raise


def fetch_object_metadata(
    bucket_name: str,
    object_key: str,
    s3_client: Optional["S3Client"] = None,
) -> S3Object:
    """
    Fetch metadata about a single object with head_object.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param s3_client: An optional boto3 S3 client. If not provided, the shared one is used.
    """
    s3_client = s3_client or get_s3_client()
    response = s3_client.head_object(Bucket=bucket_name, Key=object_key)
    return S3Object(
        key=object_key,
        name=base_name(object_key) or object_key,
        size=response.get("ContentLength"),
        last_modified=response.get("LastModified"),
        etag=response.get("ETag"),
        content_type=response.get("ContentType"),
        is_folder=object_key.endswith(DELIMITER),
    )


def fetch_object_content(
    bucket_name: str,
    object_key: str,
    max_bytes: int,
    s3_client: Optional["S3Client"] = None,
) -> ObjectContentResponse:
    """
    Read a (small) object as text for inline previews.

    Bytes that are not valid UTF-8 are replaced rather than rejected.

    :raises ObjectTooLargeError: when the object is larger than `max_bytes`.
    """
    s3_client = s3_client or get_s3_client()
    response = s3_client.get_object(Bucket=bucket_name, Key=object_key)
    size = response.get("ContentLength") or 0
    body = response["Body"]
    try:
        if size > max_bytes:
            raise ObjectTooLargeError(object_key, size, max_bytes)
        content = body.read().decode("utf-8", errors="replace")
    finally:
        body.close()

    logger.debug(f"Read {size} bytes from s3://{bucket_name}/{object_key} for preview")
    return ObjectContentResponse(content=content, content_type=response.get("ContentType"))
