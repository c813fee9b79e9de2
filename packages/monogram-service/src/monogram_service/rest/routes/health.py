"""Health check endpoints."""

from fastapi import APIRouter

from monogram import __version__

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
async def ready() -> dict[str, str]:
    return {"status": "ready", "version": __version__}
