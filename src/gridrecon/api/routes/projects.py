"""Project dataset endpoints: diff incoming rows against the project, commit a changeset."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from gridrecon.api.deps import get_service
from gridrecon.models.changeset import ChangeSet
from gridrecon.models.dataset import DatasetSnapshot
from gridrecon.reconcile.report import render_change_report
from gridrecon.services.project_service import ProjectReconciliationService

router = APIRouter(tags=["projects"])


class DiffRequest(BaseModel):
    """Raw rows (header → cell value) per category, mapped with the project's stored configuration."""

    tables: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)


class DiffResponse(BaseModel):
    change_set: ChangeSet
    summary: dict[str, dict[str, int]]
    report: str


class CommitRequest(BaseModel):
    change_set: ChangeSet
    prune_removed: Optional[bool] = None


class CommitResponse(BaseModel):
    project_id: str
    record_counts: dict[str, int]


@router.post("/{project_id}/diff")
async def diff(
    project_id: str,
    request: DiffRequest,
    service: ProjectReconciliationService = Depends(get_service),
) -> DiffResponse:
    incoming = DatasetSnapshot()
    for category in sorted(request.tables):
        service.import_rows(project_id, category, request.tables[category], incoming)
    change_set = service.preview(project_id, incoming)
    return DiffResponse(
        change_set=change_set,
        summary=change_set.summary(),
        report=render_change_report(change_set),
    )


@router.post("/{project_id}/commit")
async def commit(
    project_id: str,
    request: CommitRequest,
    service: ProjectReconciliationService = Depends(get_service),
) -> CommitResponse:
    updated = service.commit(project_id, request.change_set, request.prune_removed)
    return CommitResponse(
        project_id=project_id,
        record_counts={name: updated.record_count(name) for name in updated.category_names},
    )


@router.get("/{project_id}/snapshot")
async def snapshot(
    project_id: str,
    service: ProjectReconciliationService = Depends(get_service),
) -> DatasetSnapshot:
    return service.current_snapshot(project_id)
