"""Health check endpoint"""

from fastapi import APIRouter

from planner.config import get_settings

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "planner-backend",
        "store": get_settings().store_backend,
    }
