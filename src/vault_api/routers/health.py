from fastapi import APIRouter, Request

from vault_api.config.settings import Settings

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns status of the API and the object store along with deployment mode.
    """
    settings: Settings = request.app.state.settings

    health_status = {
        "status": "ok",
        "deployment_mode": settings.deployment_mode,
        "components": {
            "api": "ready",
            "store": "initializing",
        },
        "ready": False
    }

    # Check object store status
    try:
        store = request.app.state.store
        if store.is_ready():
            health_status["components"]["store"] = "ready"
        else:
            health_status["components"]["store"] = "unavailable"
            health_status["status"] = "degraded"
    except Exception as e:
        health_status["components"]["store"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    # Overall ready status
    health_status["ready"] = all(
        state == "ready" for state in health_status["components"].values()
    )

    return health_status
