"""ChangeSet models produced by DatasetReconciler.diff."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from gridrecon.models.dataset import EquipmentRecord


class FieldDelta(BaseModel):
    model_config = {"frozen": True}

    field: str
    old: Optional[str] = None
    new: Optional[str] = None

    def as_tuple(self) -> tuple[str, Optional[str], Optional[str]]:
        return (self.field, self.old, self.new)


class ModifiedRecord(BaseModel):
    key: str  # key token
    display_key: str
    record: EquipmentRecord  # incoming version
    deltas: list[FieldDelta] = Field(default_factory=list)


class CategoryChangeSet(BaseModel):
    """Four disjoint key sets for one category plus data-quality warnings."""

    category: str
    added: dict[str, EquipmentRecord] = Field(default_factory=dict)
    removed: dict[str, str] = Field(default_factory=dict)  # token -> display key
    modified: dict[str, ModifiedRecord] = Field(default_factory=dict)
    unchanged: dict[str, str] = Field(default_factory=dict)  # token -> display key
    warnings: list[str] = Field(default_factory=list)

    @property
    def added_keys(self) -> list[str]:
        return sorted(self.added)

    @property
    def removed_keys(self) -> list[str]:
        return sorted(self.removed)

    @property
    def modified_keys(self) -> list[str]:
        return sorted(self.modified)

    @property
    def unchanged_keys(self) -> list[str]:
        return sorted(self.unchanged)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.modified)

    def counts(self) -> dict[str, int]:
        return {
            "added": len(self.added),
            "removed": len(self.removed),
            "modified": len(self.modified),
            "unchanged": len(self.unchanged),
            "warnings": len(self.warnings),
        }


class ChangeSet(BaseModel):
    """Result of diffing two snapshots; never mutates either input."""

    categories: dict[str, CategoryChangeSet] = Field(default_factory=dict)

    def category(self, name: str) -> CategoryChangeSet:
        return self.categories.get(name) or CategoryChangeSet(category=name)

    @property
    def category_names(self) -> list[str]:
        return sorted(self.categories)

    @property
    def is_empty(self) -> bool:
        return all(c.is_empty for c in self.categories.values())

    @property
    def has_warnings(self) -> bool:
        return any(c.warnings for c in self.categories.values())

    def summary(self) -> dict[str, dict[str, int]]:
        return {name: self.categories[name].counts() for name in self.category_names}
