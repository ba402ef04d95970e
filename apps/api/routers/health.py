"""
Health check endpoints.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from config import settings

router = APIRouter()


def _missing_credentials() -> list:
    missing = []
    if not settings.YOUTUBE_API_KEY.strip():
        missing.append("YOUTUBE_API_KEY")
    if not settings.OPENAI_API_KEY.strip():
        missing.append("OPENAI_API_KEY")
    return missing


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Reports whether the external API keys are configured, never their values.
    """
    missing = _missing_credentials()
    return {
        "status": "healthy" if not missing else "degraded",
        "api": "up",
        "youtube_api_key": "missing" if "YOUTUBE_API_KEY" in missing else "configured",
        # Requests may still supply their own OpenAI key
        "openai_api_key": "missing" if "OPENAI_API_KEY" in missing else "configured",
    }


@router.get("/health/ready")
async def readiness_check():
    """Kubernetes-style readiness check."""
    missing = [name for name in _missing_credentials() if name == "YOUTUBE_API_KEY"]

    if missing:
        return JSONResponse(
            status_code=503,
            content={"ready": False, "missing": missing},
        )
    return {"ready": True}


@router.get("/health/live")
async def liveness_check():
    """Kubernetes-style liveness check."""
    return {"alive": True}
