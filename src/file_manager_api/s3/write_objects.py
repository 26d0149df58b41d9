"""Functions for writing objects to an S3 bucket--the "C" and "U" in CRUD."""

import logging
from typing import BinaryIO, Callable, Optional

from file_manager_api.keys import folder_key
from file_manager_api.s3.client import get_s3_client
from file_manager_api.utils.decorators import log_execution_time

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@log_execution_time
def upload_s3_object(
    bucket_name: str,
    object_key: str,
    file_obj: BinaryIO,
    content_type: Optional[str] = None,
    progress_callback: Optional[Callable[[int], None]] = None,
    s3_client: Optional["S3Client"] = None,
) -> None:
    """
    Upload a file to an S3 bucket, switching to multipart for large files.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param file_obj: A readable binary file object.
    :param content_type: The MIME type of the file, e.g. "text/plain" for a text file.
    :param progress_callback: Called with the cumulative number of bytes sent so far.
    :param s3_client: An optional boto3 S3 client. If not provided, the shared one is used.
    """
    content_type = content_type or DEFAULT_CONTENT_TYPE
    s3_client = s3_client or get_s3_client()

    transferred = 0

    def _callback(bytes_amount: int) -> None:
        nonlocal transferred
        transferred += bytes_amount
        progress_callback(transferred)

    s3_client.upload_fileobj(
        file_obj,
        bucket_name,
        object_key,
        ExtraArgs={"ContentType": content_type},
        Callback=_callback if progress_callback else None,
    )
    logger.info(f"Uploaded s3://{bucket_name}/{object_key} ({transferred or 'unknown'} bytes)")


def create_folder(
    bucket_name: str,
    folder_path: str,
    s3_client: Optional["S3Client"] = None,
) -> str:
    """
    Create an empty folder marker object.

    :param bucket_name: The name of the S3 bucket.
    :param folder_path: Folder path, with or without the trailing `/`.
    :param s3_client: An optional boto3 S3 client. If not provided, the shared one is used.

    :return: The key of the marker object.
    """
    s3_client = s3_client or get_s3_client()
    key = folder_key(folder_path)
    s3_client.put_object(Bucket=bucket_name, Key=key, Body=b"")
    logger.info(f"Created folder s3://{bucket_name}/{key}")
    return key
