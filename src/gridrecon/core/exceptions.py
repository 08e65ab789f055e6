"""GridRecon exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gridrecon.models.dataset import DatasetSnapshot


class GridReconError(Exception):
    """Base exception for all GridRecon errors."""


class SchemaError(GridReconError):
    """The property catalog cannot satisfy the requested operation."""


class UnknownCategoryError(SchemaError):
    """Equipment category is not declared in the property catalog."""

    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(f"Unknown equipment category: {category!r}")


class MalformedDescriptorError(SchemaError):
    """A property descriptor or category catalog is invalid."""


class MappingConfigurationError(GridReconError):
    """Mapping configuration failed validation."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid mapping configuration: " + "; ".join(self.errors))


class MalformedRecordError(GridReconError):
    """An equipment record violates its category contract."""

    def __init__(self, category: str, reason: str) -> None:
        self.category = category
        self.reason = reason
        super().__init__(f"Malformed {category} record: {reason}")


class CommitError(GridReconError):
    """A changeset could not be applied; no category was changed."""

    def __init__(self, category: str, reason: str, snapshot: DatasetSnapshot) -> None:
        self.category = category
        self.reason = reason
        self.snapshot = snapshot
        super().__init__(f"Commit aborted in category {category!r}: {reason}")


class CommitConflictError(GridReconError):
    """Another writer holds the commit lock for this project."""

    def __init__(self, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(f"Commit already in progress for project {project_id!r}")


class StoreError(GridReconError):
    """Persistence backend operation failed."""
