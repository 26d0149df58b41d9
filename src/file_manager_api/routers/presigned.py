from fastapi import APIRouter, Depends

from file_manager_api.auth import AuthenticatedUser, get_current_user
from file_manager_api.config.settings import Settings
from file_manager_api.dependencies import ensure_bucket_allowed, get_app_settings, get_s3_client
from file_manager_api.s3.presigned_urls import generate_download_url, generate_upload_url
from file_manager_api.schemas import PresignedUrlRequest, PresignedUrlResponse

router = APIRouter()


@router.post("/presigned", response_model=PresignedUrlResponse)
def create_presigned_url(
    body: PresignedUrlRequest,
    settings: Settings = Depends(get_app_settings),
    s3_client=Depends(get_s3_client),
    user: AuthenticatedUser = Depends(get_current_user),
) -> PresignedUrlResponse:
    """
    Generate a presigned URL so the browser can transfer the object directly.

    - `upload`: a PUT URL; send the same `Content-Type` that was requested.
    - `download`: a GET URL that saves the object under its own name.
    """
    ensure_bucket_allowed(settings, body.bucket)

    if body.action == "upload":
        return generate_upload_url(
            body.bucket,
            body.key,
            content_type=body.content_type,
            expires_in=settings.presigned_url_expiry,
            s3_client=s3_client,
        )
    return generate_download_url(
        body.bucket,
        body.key,
        expires_in=settings.presigned_url_expiry,
        as_attachment=True,
        s3_client=s3_client,
    )
