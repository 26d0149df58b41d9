import logging
from typing import Literal, Optional

from fastapi import (
    APIRouter,
    Depends,
    Path,
    Query,
    Response,
    status
)

from file_manager_api.auth import AuthenticatedUser, get_current_user
from file_manager_api.config.settings import Settings
from file_manager_api.dependencies import ensure_bucket_allowed, get_app_settings, get_s3_client
from file_manager_api.errors import InvalidKeyError
from file_manager_api.keys import renamed_key
from file_manager_api.s3.copy_objects import copy_s3_object, move_s3_object, rename_s3_object
from file_manager_api.s3.delete_objects import delete_s3_object, delete_s3_objects
from file_manager_api.s3.read_objects import (
    fetch_object_content,
    fetch_object_metadata,
    list_objects,
)
from file_manager_api.s3.write_objects import create_folder
from file_manager_api.schemas import (
    GetObjectsQueryParams,
    ListObjectsResponse,
    ObjectAction,
    ObjectActionRequest,
    ErrorResponse,
    ObjectContentResponse,
    ObjectsAction,
    ObjectsActionRequest,
    S3Object,
    SuccessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_key(key: str) -> str:
    if not key:
        raise InvalidKeyError("Bucket and key are required")
    return key


@router.get("/objects", response_model=ListObjectsResponse)
def get_objects(
    query_params: GetObjectsQueryParams = Depends(),
    settings: Settings = Depends(get_app_settings),
    s3_client=Depends(get_s3_client),
    user: AuthenticatedUser = Depends(get_current_user),
) -> ListObjectsResponse:
    """
    List one folder of a bucket.

    Subfolders come first, followed by files. When `is_truncated` is true,
    pass `next_continuation_token` back as `continuation_token` for the next page.
    """
    ensure_bucket_allowed(settings, query_params.bucket)
    return list_objects(
        bucket_name=query_params.bucket,
        prefix=query_params.prefix,
        continuation_token=query_params.continuation_token,
        s3_client=s3_client,
    )


@router.post("/objects", response_model=SuccessResponse)
def post_objects(
    body: ObjectsActionRequest,
    settings: Settings = Depends(get_app_settings),
    s3_client=Depends(get_s3_client),
    user: AuthenticatedUser = Depends(get_current_user),
) -> SuccessResponse:
    """Create a folder, or delete several objects and folders at once."""
    ensure_bucket_allowed(settings, body.bucket)

    if body.action == ObjectsAction.CREATE_FOLDER:
        create_folder(body.bucket, body.folder_path.strip(), s3_client=s3_client)
    else:
        delete_s3_objects(body.bucket, body.keys, s3_client=s3_client)
        logger.info(f"User {user.user_id} deleted {len(body.keys)} item(s) from {body.bucket}")

    return SuccessResponse()


@router.get(
    "/objects/{bucket}/{key:path}",
    response_model=None,
    responses={
        status.HTTP_200_OK: {"model": S3Object, "description": "Object metadata, or its text with `action=content`."},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Object not found for the given `key`."},
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: {"model": ErrorResponse, "description": "Object too large to preview."},
    },
)
def get_object(
    bucket: str = Path(..., description="The bucket holding the object"),
    key: str = Path(..., description="The key of the object"),
    action: Optional[Literal["content"]] = Query(None, description="`content` returns the object's text"),
    settings: Settings = Depends(get_app_settings),
    s3_client=Depends(get_s3_client),
    user: AuthenticatedUser = Depends(get_current_user),
) -> S3Object | ObjectContentResponse:
    """Retrieve object metadata, or the object's content for previews."""
    ensure_bucket_allowed(settings, bucket)
    _require_key(key)

    if action == "content":
        return fetch_object_content(bucket, key, max_bytes=settings.preview_max_bytes, s3_client=s3_client)
    return fetch_object_metadata(bucket, key, s3_client=s3_client)


@router.head(
    "/objects/{bucket}/{key:path}",
    responses={
        status.HTTP_404_NOT_FOUND: {
            "description": "Object not found for the given `key`.",
        },
        status.HTTP_200_OK: {
            "headers": {
                "Content-Type": {
                    "description": "The [MIME type](https://developer.mozilla.org/en-US/docs/Web/HTTP/Basics_of_HTTP/MIME_types/Common_types) of the object.",
                    "example": "text/plain",
                    "schema": {"type": "string"},
                },
                "Content-Length": {
                    "description": "The size of the object in bytes.",
                    "example": 512,
                    "schema": {"type": "integer"},
                },
                "Last-Modified": {
                    "description": "The last modified date of the object.",
                    "example": "Thu, 01 Jan 2022 00:00:00 GMT",
                    "schema": {"type": "string", "format": "date-time"},
                },
                "ETag": {
                    "description": "The entity tag of the object.",
                    "schema": {"type": "string"},
                },
            }
        },
    },
)
def head_object(
    response: Response,
    bucket: str,
    key: str,
    settings: Settings = Depends(get_app_settings),
    s3_client=Depends(get_s3_client),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Response:
    """
    Retrieve object metadata as headers.

    Note: by convention, HEAD requests MUST NOT return a body in the response.
    """
    ensure_bucket_allowed(settings, bucket)
    _require_key(key)

    metadata = fetch_object_metadata(bucket, key, s3_client=s3_client)
    if metadata.content_type:
        response.headers["Content-Type"] = metadata.content_type
    response.headers["Content-Length"] = str(metadata.size or 0)
    if metadata.last_modified:
        response.headers["Last-Modified"] = metadata.last_modified.strftime("%a, %d %b %Y %H:%M:%S GMT")
    if metadata.etag:
        response.headers["ETag"] = metadata.etag
    response.status_code = status.HTTP_200_OK
    return response


@router.delete("/objects/{bucket}/{key:path}", response_model=SuccessResponse)
def delete_object(
    bucket: str,
    key: str,
    settings: Settings = Depends(get_app_settings),
    s3_client=Depends(get_s3_client),
    user: AuthenticatedUser = Depends(get_current_user),
) -> SuccessResponse:
    """Delete an object; a key ending with `/` deletes the whole folder."""
    ensure_bucket_allowed(settings, bucket)
    _require_key(key)

    delete_s3_object(bucket, key, s3_client=s3_client)
    logger.info(f"User {user.user_id} deleted s3://{bucket}/{key}")
    return SuccessResponse()


@router.patch("/objects/{bucket}/{key:path}", response_model=SuccessResponse)
def patch_object(
    body: ObjectActionRequest,
    bucket: str,
    key: str,
    settings: Settings = Depends(get_app_settings),
    s3_client=Depends(get_s3_client),
    user: AuthenticatedUser = Depends(get_current_user),
) -> SuccessResponse:
    """Rename, copy or move an object or folder."""
    ensure_bucket_allowed(settings, bucket)
    _require_key(key)

    if body.action == ObjectAction.RENAME:
        new_key = body.new_key or renamed_key(key, body.new_name)
        rename_s3_object(bucket, key, new_key, s3_client=s3_client)
    else:
        ensure_bucket_allowed(settings, body.destination_bucket)
        operation = copy_s3_object if body.action == ObjectAction.COPY else move_s3_object
        operation(bucket, key, body.destination_bucket, body.destination_key, s3_client=s3_client)

    logger.info(f"User {user.user_id} ran {body.action.value} on s3://{bucket}/{key}")
    return SuccessResponse()
