"""Health check endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from gridrecon.api.deps import get_service
from gridrecon.services.project_service import ProjectReconciliationService

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(service: ProjectReconciliationService = Depends(get_service)) -> dict[str, Any]:
    return {**service.health_check(), "status": "ready"}
