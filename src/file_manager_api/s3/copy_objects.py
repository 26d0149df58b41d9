"""
Copy, move and rename.

S3 has no rename: a move is a server-side copy followed by a delete of the
source. Folder keys (ending with `/`) apply the operation to every key under
the prefix, keeping each key's path relative to the folder.
"""

import logging
from typing import List, Optional, Tuple

from file_manager_api.errors import InvalidKeyError
from file_manager_api.keys import base_name, is_folder_key, normalize_prefix
from file_manager_api.s3.client import get_s3_client
from file_manager_api.s3.delete_objects import delete_s3_objects
from file_manager_api.s3.read_objects import iter_keys_under_prefix
from file_manager_api.utils.decorators import log_execution_time

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)


def plan_copy(
    source_bucket: str,
    source_key: str,
    destination_bucket: str,
    destination_key: str,
    s3_client: "S3Client",
) -> List[Tuple[str, str]]:
    """Return the `(source_key, destination_key)` pairs a copy will perform."""
    if not source_key or not destination_key:
        raise InvalidKeyError("Source and destination keys are required")

    if not is_folder_key(source_key):
        if is_folder_key(destination_key):
            # copying a file "into" a folder keeps its name
            destination_key = normalize_prefix(destination_key) + base_name(source_key)
        if source_bucket == destination_bucket and source_key == destination_key:
            raise InvalidKeyError(f"Source and destination are the same: {source_key}")
        return [(source_key, destination_key)]

    destination_prefix = normalize_prefix(destination_key)
    if not destination_prefix:
        raise InvalidKeyError("A folder cannot be copied onto the bucket root")
    if source_bucket == destination_bucket and destination_prefix.startswith(source_key):
        raise InvalidKeyError(f"Cannot copy folder '{source_key}' into itself")

    pairs = [
        (key, destination_prefix + key[len(source_key):])
        for key in iter_keys_under_prefix(source_bucket, source_key, s3_client=s3_client)
    ]
    if source_bucket == destination_bucket:
        # a target that is also a source would be overwritten, then deleted by a move
        overlap = {src for src, _ in pairs} & {dst for _, dst in pairs}
        if overlap:
            raise InvalidKeyError(
                f"Copying '{source_key}' to '{destination_prefix}' would overwrite "
                f"{len(overlap)} of its own object(s), e.g. '{sorted(overlap)[0]}'"
            )
    return pairs


@log_execution_time
def copy_s3_object(
    source_bucket: str,
    source_key: str,
    destination_bucket: str,
    destination_key: str,
    s3_client: Optional["S3Client"] = None,
) -> List[Tuple[str, str]]:
    """
    Copy an object or a folder, possibly across buckets.

    :param source_bucket: Bucket holding the source.
    :param source_key: Key of the object, or a folder prefix ending with `/`.
    :param destination_bucket: Bucket to copy into.
    :param destination_key: Target key, or target folder prefix for folder copies.
    :param s3_client: An optional boto3 S3 client. If not provided, the shared one is used.

    :return: The `(source_key, destination_key)` pairs that were copied.
    """
    s3_client = s3_client or get_s3_client()
    pairs = plan_copy(source_bucket, source_key, destination_bucket, destination_key, s3_client)
    for src, dst in pairs:
        s3_client.copy(
            CopySource={"Bucket": source_bucket, "Key": src},
            Bucket=destination_bucket,
            Key=dst,
        )
        logger.debug(f"Copied s3://{source_bucket}/{src} to s3://{destination_bucket}/{dst}")

    logger.info(
        f"Copied {len(pairs)} object(s) from s3://{source_bucket}/{source_key} "
        f"to s3://{destination_bucket}/{destination_key}"
    )
    return pairs


def move_s3_object(
    source_bucket: str,
    source_key: str,
    destination_bucket: str,
    destination_key: str,
    s3_client: Optional["S3Client"] = None,
) -> List[Tuple[str, str]]:
    """
    Move an object or a folder: copy everything, then delete the sources.

    Sources are only deleted after every copy succeeded.
    """
    s3_client = s3_client or get_s3_client()
    pairs = copy_s3_object(source_bucket, source_key, destination_bucket, destination_key, s3_client=s3_client)
    if pairs:
        delete_s3_objects(
            source_bucket,
            [src for src, _ in pairs],
            expand_folders=False,
            s3_client=s3_client,
        )
    return pairs


def rename_s3_object(
    bucket_name: str,
    old_key: str,
    new_key: str,
    s3_client: Optional["S3Client"] = None,
) -> List[Tuple[str, str]]:
    """Rename is a move within the same bucket."""
    if is_folder_key(old_key) != is_folder_key(new_key):
        raise InvalidKeyError("A folder can only be renamed to a folder, and a file to a file")
    return move_s3_object(bucket_name, old_key, bucket_name, new_key, s3_client=s3_client)
