####################################
# --- Request/response schemas --- #
####################################

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator
)
from typing_extensions import Self

DEFAULT_LIST_OBJECTS_MAX_KEYS = 1000
DEFAULT_LIST_OBJECTS_PREFIX = ""


class Bucket(BaseModel):
    """A bucket visible to the current user."""
    name: str = Field(json_schema_extra={"example": "team-assets"})
    creation_date: Optional[datetime] = None


class S3Object(BaseModel):
    """A row of the folder view: either a file or a folder."""
    key: str = Field(
        description="Full object key; folders end with `/`.",
        json_schema_extra={"example": "reports/2024/q1.pdf"},
    )
    name: str = Field(
        description="Display name relative to the listed prefix.",
        json_schema_extra={"example": "q1.pdf"},
    )
    size: Optional[int] = Field(None, description="The size of the object in bytes.")
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    content_type: Optional[str] = None
    is_folder: bool = False


class GetBucketsResponse(BaseModel):
    """Response model for `GET /v1/buckets`."""
    buckets: List[Bucket]


class Breadcrumb(BaseModel):
    """One step of the navigation trail; the first one is the bucket root."""
    name: str
    prefix: str


class ListObjectsResponse(BaseModel):
    """Response model for `GET /v1/objects`."""
    objects: List[S3Object]
    prefixes: List[str]
    is_truncated: bool = False
    next_continuation_token: Optional[str] = None
    prefix: str = DEFAULT_LIST_OBJECTS_PREFIX
    parent_prefix: Optional[str] = Field(None, description="Folder above `prefix`; null at the bucket root.")
    breadcrumbs: List[Breadcrumb] = []

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "objects": [
                    {"key": "reports/2024/", "name": "2024", "is_folder": True},
                    {
                        "key": "reports/readme.txt",
                        "name": "readme.txt",
                        "size": 512,
                        "last_modified": "2024-01-01T00:00:00Z",
                        "etag": "\"9b2cf535f27731c974343645a3985328\"",
                        "is_folder": False,
                    },
                ],
                "prefixes": ["reports/2024/"],
                "is_truncated": False,
                "next_continuation_token": None,
                "prefix": "reports/",
                "parent_prefix": "",
                "breadcrumbs": [
                    {"name": "team-assets", "prefix": ""},
                    {"name": "reports", "prefix": "reports/"},
                ],
            }
        }
    )


class GetObjectsQueryParams(BaseModel):
    """Query parameters for `GET /v1/objects`."""
    bucket: str = Field(..., min_length=1, description="The bucket to list.")
    prefix: str = Field(
        DEFAULT_LIST_OBJECTS_PREFIX,
        description="The folder to list; a trailing `/` is added when missing.",
    )
    continuation_token: Optional[str] = Field(
        None,
        description="The token for the next page.",
    )


class ObjectContentResponse(BaseModel):
    """Response model for `GET /v1/objects/{bucket}/{key}?action=content`."""
    content: str
    content_type: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str


class ObjectsAction(str, Enum):
    CREATE_FOLDER = "createFolder"
    DELETE = "delete"


class ObjectsActionRequest(BaseModel):
    """Request body for `POST /v1/objects`."""
    action: ObjectsAction
    bucket: str = Field(..., min_length=1)
    folder_path: Optional[str] = Field(None, description="Folder to create (`createFolder`).")
    keys: Optional[List[str]] = Field(None, description="Keys to delete (`delete`).")

    @model_validator(mode="after")
    def check_action_parameters(self) -> Self:
        if self.action == ObjectsAction.CREATE_FOLDER and not (self.folder_path or "").strip():
            raise ValueError("folder_path is required for createFolder")
        if self.action == ObjectsAction.DELETE and not self.keys:
            raise ValueError("keys are required for delete")
        return self


class ObjectAction(str, Enum):
    RENAME = "rename"
    COPY = "copy"
    MOVE = "move"


class ObjectActionRequest(BaseModel):
    """Request body for `PATCH /v1/objects/{bucket}/{key}`."""
    action: ObjectAction
    new_key: Optional[str] = Field(None, description="Target key (`rename`).")
    new_name: Optional[str] = Field(
        None,
        description="New last path segment (`rename`), an alternative to `new_key`.",
    )
    destination_bucket: Optional[str] = Field(None, description="Target bucket (`copy`/`move`).")
    destination_key: Optional[str] = Field(None, description="Target key (`copy`/`move`).")

    @model_validator(mode="after")
    def check_action_parameters(self) -> Self:
        if self.action == ObjectAction.RENAME and not (self.new_key or self.new_name):
            raise ValueError("new_key or new_name is required for rename")
        if self.action in (ObjectAction.COPY, ObjectAction.MOVE):
            if not self.destination_bucket or not self.destination_key:
                raise ValueError(f"destination_bucket and destination_key are required for {self.action.value}")
        return self


class PresignedUrlRequest(BaseModel):
    """Request body for `POST /v1/presigned`."""
    action: Literal["upload", "download"]
    bucket: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)
    content_type: Optional[str] = None


class PresignedUrlResponse(BaseModel):
    """A presigned URL and the moment it stops working."""
    url: str
    expires_at: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "url": "https://team-assets.s3.amazonaws.com/reports/q1.pdf?X-Amz-Signature=...",
                "expires_at": "2024-01-01T01:00:00Z",
            }
        }
    )
