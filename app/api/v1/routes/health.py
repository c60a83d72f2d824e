from fastapi import APIRouter
from typing import Dict

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=Dict[str, str])
async def health_check():
    """Liveness check for the event service."""
    return {"status": "healthy", "service": "eventsphere"}
