"""Auto-mapping endpoints: propose, inspect and accept column mappings."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, ValidationError

from gridrecon.api.deps import get_service
from gridrecon.core.exceptions import SchemaError
from gridrecon.matching.review import mapping_status, validate_required_mappings
from gridrecon.models.columns import ColumnSet
from gridrecon.models.mapping import MappingConfiguration
from gridrecon.models.matching import MappingProposal
from gridrecon.services.project_service import ProjectReconciliationService

router = APIRouter(tags=["mapping"])


class ProposeRequest(BaseModel):
    category: str
    headers: list[str]
    source_table: Optional[str] = None
    samples: Optional[list[list[str]]] = None


class ProposeResponse(BaseModel):
    proposal: MappingProposal
    needs_review: bool


class MappingResponse(BaseModel):
    configuration: MappingConfiguration
    status: dict[str, str] = Field(default_factory=dict)
    missing_required: dict[str, list[str]] = Field(default_factory=dict)


@router.post("/mapping/propose")
async def propose(
    request: ProposeRequest,
    service: ProjectReconciliationService = Depends(get_service),
) -> ProposeResponse:
    try:
        columns = ColumnSet.from_headers(request.headers, source_table=request.source_table, samples=request.samples)
    except ValidationError as exc:
        raise SchemaError(f"Invalid column headers: {exc.errors()[0]['msg']}") from exc
    proposal = service.propose_mapping(columns, request.category)
    return ProposeResponse(proposal=proposal, needs_review=proposal.needs_review)


def _mapping_response(service: ProjectReconciliationService, config: MappingConfiguration) -> MappingResponse:
    catalog = service.catalog
    report = validate_required_mappings(config, catalog, [c for c in config.categories() if c in catalog])
    return MappingResponse(
        configuration=config,
        status={name: mapping_status(config, catalog, name).value for name in catalog.category_names},
        missing_required=report.missing,
    )


@router.get("/projects/{project_id}/mapping")
async def get_mapping(
    project_id: str,
    service: ProjectReconciliationService = Depends(get_service),
) -> MappingResponse:
    return _mapping_response(service, service.mapping_configuration(project_id))


@router.post("/projects/{project_id}/mapping/accept")
async def accept(
    project_id: str,
    proposal: MappingProposal,
    service: ProjectReconciliationService = Depends(get_service),
) -> MappingResponse:
    """Store the Confirmed candidates of a proposal as mapping entries."""
    return _mapping_response(service, service.accept_proposal(project_id, proposal))
