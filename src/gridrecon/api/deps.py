"""Request-scoped access to application state."""

from __future__ import annotations

from fastapi import Request

from gridrecon.services.project_service import ProjectReconciliationService


def get_service(request: Request) -> ProjectReconciliationService:
    return request.app.state.service
