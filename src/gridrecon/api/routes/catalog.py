"""Property catalog endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from gridrecon.api.deps import get_service
from gridrecon.services.project_service import ProjectReconciliationService

router = APIRouter(tags=["catalog"])


@router.get("")
async def list_categories(service: ProjectReconciliationService = Depends(get_service)) -> dict[str, list[str]]:
    return {"categories": service.catalog.category_names}


@router.get("/{category}")
async def get_category(category: str, service: ProjectReconciliationService = Depends(get_service)) -> dict[str, Any]:
    """Declared properties of one category, with its natural key."""
    declared = service.catalog.category(category)
    return {
        **declared.model_dump(mode="json"),
        "key_properties": list(declared.key_properties),
        "required_properties": list(declared.required_properties),
    }
