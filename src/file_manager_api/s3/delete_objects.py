"""Functions for deleting objects from an S3 bucket--the "D" in CRUD."""

import logging
from typing import List, Optional

from file_manager_api.errors import DeleteObjectsError, InvalidKeyError
from file_manager_api.keys import is_folder_key
from file_manager_api.s3.client import get_s3_client
from file_manager_api.s3.read_objects import iter_keys_under_prefix
from file_manager_api.utils.decorators import log_execution_time

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)

# delete_objects accepts at most 1000 keys per call
DELETE_BATCH_SIZE = 1000


def expand_keys(bucket_name: str, keys: List[str], s3_client: "S3Client") -> List[str]:
    """Replace every folder key with the keys stored under it, dropping duplicates."""
    expanded: List[str] = []
    seen = set()
    for key in keys:
        if not key:
            raise InvalidKeyError("Object key must not be empty")
        candidates = iter_keys_under_prefix(bucket_name, key, s3_client=s3_client) if is_folder_key(key) else [key]
        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                expanded.append(candidate)
    return expanded


@log_execution_time
def delete_s3_objects(
    bucket_name: str,
    keys: List[str],
    expand_folders: bool = True,
    s3_client: Optional["S3Client"] = None,
) -> int:
    """
    Delete several objects, expanding folder keys to everything beneath them.

    :param bucket_name: The name of the S3 bucket.
    :param keys: Object keys; keys ending with `/` are treated as folders.
    :param expand_folders: When False, the keys are deleted exactly as given.
    :param s3_client: An optional boto3 S3 client. If not provided, the shared one is used.

    :return: The number of objects deleted.
    :raises DeleteObjectsError: when the store reports a failure for any key.
    """
    s3_client = s3_client or get_s3_client()
    if expand_folders:
        object_keys = expand_keys(bucket_name, keys, s3_client)
    else:
        object_keys = list(dict.fromkeys(keys))

    failed_keys: List[str] = []
    for i in range(0, len(object_keys), DELETE_BATCH_SIZE):
        batch = object_keys[i:i + DELETE_BATCH_SIZE]
        response = s3_client.delete_objects(
            Bucket=bucket_name,
            Delete={
                "Objects": [{"Key": key} for key in batch],
                "Quiet": True,  # only errors are reported back
            },
        )
        for error in response.get("Errors", []):
            logger.warning(
                f"Failed to delete s3://{bucket_name}/{error.get('Key')}: "
                f"{error.get('Code')} - {error.get('Message')}"
            )
            failed_keys.append(error.get("Key", ""))

    if failed_keys:
        raise DeleteObjectsError(failed_keys)

    logger.info(f"Deleted {len(object_keys)} object(s) from bucket {bucket_name}")
    return len(object_keys)


def delete_s3_object(
    bucket_name: str,
    object_key: str,
    s3_client: Optional["S3Client"] = None,
) -> None:
    """
    Delete one object, or a whole folder when the key ends with `/`.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param s3_client: An optional boto3 S3 client. If not provided, the shared one is used.
    """
    s3_client = s3_client or get_s3_client()
    if is_folder_key(object_key):
        delete_s3_objects(bucket_name, [object_key], s3_client=s3_client)
        return
    s3_client.delete_object(Bucket=bucket_name, Key=object_key)
    logger.info(f"Deleted s3://{bucket_name}/{object_key}")
