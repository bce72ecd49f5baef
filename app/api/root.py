"""Root informational endpoint."""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["root"])

SERVICE_NAME = "Rust API Server"
SERVICE_VERSION = "1.0.0"


@router.get("/")
async def index() -> dict[str, str]:
    """Return the static service name and version."""
    return {"message": SERVICE_NAME, "version": SERVICE_VERSION}
