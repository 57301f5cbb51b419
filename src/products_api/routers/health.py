import logging

from fastapi import APIRouter, Request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns status of the API, object storage and document store along with
    deployment mode.
    """
    settings = request.app.state.settings

    health_status = {
        "status": "ok",
        "deployment_mode": settings.deployment_mode,
        "components": {
            "api": "ready",
            "storage": "initializing",
            "database": "initializing",
        },
        "ready": False
    }

    # Check object storage
    try:
        if request.app.state.object_storage.ping():
            health_status["components"]["storage"] = "ready"
        else:
            health_status["components"]["storage"] = f"error: bucket {settings.s3_bucket_name} not found"
            health_status["status"] = "degraded"
    except Exception as e:
        logger.warning(f"Storage health check failed: {e}")
        health_status["components"]["storage"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    # Check document store
    try:
        request.app.state.document_store.ping()
        health_status["components"]["database"] = "ready"
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        health_status["components"]["database"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    health_status["ready"] = all(
        component == "ready" for component in health_status["components"].values()
    )

    return health_status
