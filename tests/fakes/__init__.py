"""Shared test doubles: re-export memory backends."""

from __future__ import annotations

from gridrecon.persistence.memory_backend import (
    MemoryCommitLock,
    MemoryMappingStore,
    MemorySnapshotStore,
)

__all__ = ["MemoryCommitLock", "MemoryMappingStore", "MemorySnapshotStore"]
