from fastapi import APIRouter, Depends

from file_manager_api.auth import AuthenticatedUser, get_current_user
from file_manager_api.config.settings import Settings
from file_manager_api.dependencies import get_app_settings, get_s3_client
from file_manager_api.s3.read_objects import list_buckets
from file_manager_api.schemas import GetBucketsResponse

router = APIRouter()


@router.get("/buckets", response_model=GetBucketsResponse)
def get_buckets(
    settings: Settings = Depends(get_app_settings),
    s3_client=Depends(get_s3_client),
    user: AuthenticatedUser = Depends(get_current_user),
) -> GetBucketsResponse:
    """List the buckets the user may browse, honouring `S3_ALLOWED_BUCKETS`."""
    buckets = list_buckets(allowed_buckets=settings.allowed_buckets, s3_client=s3_client)
    return GetBucketsResponse(buckets=buckets)
