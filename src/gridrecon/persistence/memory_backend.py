"""In-memory backends for unit tests and the "memory" backend setting."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from gridrecon.core.exceptions import CommitConflictError
from gridrecon.models.dataset import DatasetSnapshot
from gridrecon.models.mapping import MappingConfiguration

logger = logging.getLogger(__name__)


class MemoryMappingStore:
    """Dict-backed IMappingStore."""

    def __init__(self) -> None:
        self._configs: dict[str, MappingConfiguration] = {}

    def get_configuration(self, project_id: str) -> MappingConfiguration:
        config = self._configs.get(project_id)
        return config.model_copy(deep=True) if config else MappingConfiguration()

    def save_configuration(self, project_id: str, config: MappingConfiguration) -> None:
        self._configs[project_id] = config.model_copy(deep=True)


class MemorySnapshotStore:
    """Dict-backed ISnapshotStore; stores copies so callers cannot mutate saved state."""

    def __init__(self) -> None:
        self._snapshots: dict[str, DatasetSnapshot] = {}
        self.save_count = 0

    def load(self, project_id: str) -> DatasetSnapshot:
        snapshot = self._snapshots.get(project_id)
        return snapshot.copy_snapshot() if snapshot else DatasetSnapshot()

    def save(self, project_id: str, snapshot: DatasetSnapshot) -> None:
        self._snapshots[project_id] = snapshot.copy_snapshot()
        self.save_count += 1


class MemoryCommitLock:
    """Per-project threading.Lock implementing ICommitLock."""

    def __init__(self, blocking_timeout: float = 0.0) -> None:
        self._blocking_timeout = blocking_timeout
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, project_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(project_id, threading.Lock())

    @contextmanager
    def hold(self, project_id: str) -> Iterator[None]:
        lock = self._lock_for(project_id)
        if self._blocking_timeout > 0:
            acquired = lock.acquire(timeout=self._blocking_timeout)
        else:
            acquired = lock.acquire(blocking=False)
        if not acquired:
            raise CommitConflictError(project_id)
        logger.debug("Acquired commit lock for %s", project_id)
        try:
            yield
        finally:
            lock.release()
