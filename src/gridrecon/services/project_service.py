"""Project-level workflow: propose mappings, import rows, preview and commit changes."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from gridrecon.catalog.loader import default_catalog
from gridrecon.core.config import AppSettings
from gridrecon.core.exceptions import CommitError
from gridrecon.core.protocols import ICommitLock, IMappingStore, ISnapshotStore
from gridrecon.core.types import Row
from gridrecon.matching.auto_mapper import AutoMapper
from gridrecon.models.catalog import PropertyCatalog
from gridrecon.models.changeset import ChangeSet
from gridrecon.models.columns import ColumnSet
from gridrecon.models.dataset import DatasetSnapshot
from gridrecon.models.mapping import MappingConfiguration
from gridrecon.models.matching import MappingProposal
from gridrecon.persistence import create_persistence
from gridrecon.reconcile.importer import SnapshotBuilder
from gridrecon.reconcile.reconciler import DatasetReconciler

logger = logging.getLogger(__name__)


class ProjectReconciliationService:
    """Wires AutoMapper and DatasetReconciler to the project stores.

    Commits run under the project's commit lock; diffs and proposals are
    read-only and need no lock.
    """

    def __init__(
        self,
        *,
        settings: AppSettings,
        catalog: PropertyCatalog,
        mapping_store: IMappingStore,
        snapshot_store: ISnapshotStore,
        commit_lock: ICommitLock,
    ) -> None:
        self._settings = settings
        self._catalog = catalog
        self._mappings = mapping_store
        self._snapshots = snapshot_store
        self._lock = commit_lock
        self._mapper = AutoMapper(settings.matching)
        self._reconciler = DatasetReconciler.from_config(settings.reconcile, catalog)

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> "ProjectReconciliationService":
        settings = settings or AppSettings()
        mapping_store, snapshot_store, commit_lock = create_persistence(settings)
        return cls(
            settings=settings,
            catalog=default_catalog(settings.catalog_path),
            mapping_store=mapping_store,
            snapshot_store=snapshot_store,
            commit_lock=commit_lock,
        )

    @property
    def catalog(self) -> PropertyCatalog:
        return self._catalog

    def propose_mapping(self, columns: ColumnSet, category: str) -> MappingProposal:
        return self._mapper.propose_for(columns, self._catalog, category)

    def mapping_configuration(self, project_id: str) -> MappingConfiguration:
        return self._mappings.get_configuration(project_id)

    def accept_proposal(self, project_id: str, proposal: MappingProposal) -> MappingConfiguration:
        """Store the proposal's Confirmed entries, replacing earlier entries for the same properties."""
        category = self._catalog.category(proposal.category)
        config = self._mappings.get_configuration(project_id)
        entries = proposal.to_mapping_entries(category)
        for entry in entries:
            config.set_entry(entry)
        config.normalize()
        self._mappings.save_configuration(project_id, config)
        logger.info("Accepted %d confirmed mappings for %s in project %s", len(entries), category.name, project_id)
        return config

    def import_rows(
        self,
        project_id: str,
        category: str,
        rows: Iterable[Row],
        snapshot: DatasetSnapshot | None = None,
    ) -> DatasetSnapshot:
        """Build (or extend) an incoming snapshot using the project's stored mappings."""
        builder = SnapshotBuilder(self._catalog, self._mappings.get_configuration(project_id))
        return builder.build(category, rows, snapshot)

    def current_snapshot(self, project_id: str) -> DatasetSnapshot:
        return self._snapshots.load(project_id)

    def preview(self, project_id: str, incoming: DatasetSnapshot) -> ChangeSet:
        return self._reconciler.diff(self._snapshots.load(project_id), incoming)

    def commit(self, project_id: str, change_set: ChangeSet, prune_removed: bool | None = None) -> DatasetSnapshot:
        """Load, commit and save under the commit lock. Nothing is saved on CommitError."""
        if prune_removed is None:
            prune_removed = self._settings.reconcile.default_prune_removed
        with self._lock.hold(project_id):
            current = self._snapshots.load(project_id)
            try:
                updated = self._reconciler.commit(current, change_set, prune_removed=prune_removed)
            except CommitError:
                logger.error("Commit for project %s failed; stored snapshot left unchanged", project_id)
                raise
            self._snapshots.save(project_id, updated)
        logger.info("Committed changes to project %s (%d records)", project_id, updated.record_count())
        return updated

    def health_check(self) -> dict[str, Any]:
        return {
            "service": self.__class__.__name__,
            "status": "healthy",
            "environment": self._settings.environment,
            "backend": self._settings.backend,
            "categories": len(self._catalog.categories),
        }
