"""Protocol interfaces for GridRecon's pluggable seams.

Backends satisfy these structurally; no inheritance is required and the
in-memory doubles are checked with isinstance() in tests.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from gridrecon.models.dataset import DatasetSnapshot
from gridrecon.models.mapping import MappingConfiguration


# ---------------------------------------------------------------------------
# Persistence: Mapping Configuration Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IMappingStore(Protocol):
    """Confirmed column → property associations, one configuration per project."""

    def get_configuration(self, project_id: str) -> MappingConfiguration: ...

    def save_configuration(self, project_id: str, config: MappingConfiguration) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: Project Snapshot Store
# ---------------------------------------------------------------------------

@runtime_checkable
class ISnapshotStore(Protocol):
    """Current DatasetSnapshot of each project."""

    def load(self, project_id: str) -> DatasetSnapshot: ...

    def save(self, project_id: str, snapshot: DatasetSnapshot) -> None: ...


# ---------------------------------------------------------------------------
# Commit Lock (single writer per project)
# ---------------------------------------------------------------------------

@runtime_checkable
class ICommitLock(Protocol):
    """Serializes commits against one project."""

    def hold(self, project_id: str) -> AbstractContextManager[None]: ...
