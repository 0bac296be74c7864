"""Service routes."""

from fastapi import APIRouter

from readit.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    settings = get_settings()
    return {"status": "ok", "version": settings.READIT_VERSION}
