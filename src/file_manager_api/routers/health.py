import logging

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Request

from file_manager_api.config.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health")
def health_check(request: Request):
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns status of the API, object storage and authentication along with deployment mode.
    """
    settings: Settings = request.app.state.settings

    health_status = {
        "status": "ok",
        "deployment_mode": settings.deployment_mode,
        "components": {
            "api": "ready",
            "storage": "initializing",
            "auth": "ready" if settings.auth_secret_key else "not configured",
        },
        "ready": False
    }

    # Check object storage reachability
    try:
        request.app.state.s3_client.list_buckets()
        health_status["components"]["storage"] = "ready"
    except (ClientError, BotoCoreError) as e:
        logger.warning(f"Object storage health check failed: {e}")
        health_status["components"]["storage"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    if health_status["components"]["auth"] != "ready":
        health_status["status"] = "degraded"

    # Overall ready status
    health_status["ready"] = all(
        state == "ready" for state in health_status["components"].values()
    )

    return health_status
