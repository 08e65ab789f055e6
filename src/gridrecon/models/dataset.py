"""Keyed equipment records and the per-project dataset snapshot."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, Field

from gridrecon.core.exceptions import MalformedRecordError
from gridrecon.core.types import NaturalKey

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "\x1f"  # unit separator, never present in spreadsheet cells


def key_token(components: tuple[str, ...] | list[str]) -> str:
    """Canonical, case-insensitive, trimmed token for a natural key."""
    return KEY_SEPARATOR.join(str(c).strip().casefold() for c in components)


class EquipmentRecord(BaseModel):
    """Property name → string value for one piece of equipment."""

    category: str
    key_fields: tuple[str, ...]
    values: dict[str, str] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)  # partial field failures from import

    @property
    def key(self) -> NaturalKey:
        return tuple((self.values.get(f) or "").strip() for f in self.key_fields)

    @property
    def match_key(self) -> NaturalKey:
        return tuple(c.casefold() for c in self.key)

    @property
    def token(self) -> str:
        return key_token(self.key)

    @property
    def display_key(self) -> str:
        return " / ".join(self.key)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(name, default)

    def non_key_values(self) -> dict[str, str]:
        return {k: v for k, v in self.values.items() if k not in self.key_fields}

    def check(self) -> None:
        """Raise MalformedRecordError if the natural key is incomplete."""
        if not self.key_fields:
            raise MalformedRecordError(self.category, "no key fields declared")
        missing = [f for f, v in zip(self.key_fields, self.key) if not v]
        if missing:
            raise MalformedRecordError(self.category, f"blank key component(s): {', '.join(missing)}")


class DatasetSnapshot(BaseModel):
    """Category → key token → EquipmentRecord, plus data-quality warnings per category."""

    categories: dict[str, dict[str, EquipmentRecord]] = Field(default_factory=dict)
    warnings: dict[str, list[str]] = Field(default_factory=dict)

    def add(self, record: EquipmentRecord) -> bool:
        """Insert a record; on key collision the later record wins and a warning is kept.

        Returns True if the record replaced an existing one.
        """
        record.check()
        bucket = self.categories.setdefault(record.category, {})
        token = record.token
        collided = token in bucket
        if collided:
            message = f"Duplicate key {record.display_key!r}: later record replaces earlier one"
            self.warn(record.category, message)
            logger.warning("%s: %s", record.category, message)
        bucket[token] = record
        return collided

    def warn(self, category: str, message: str) -> None:
        self.warnings.setdefault(category, []).append(message)

    def get(self, category: str, key: NaturalKey | list[str] | str) -> EquipmentRecord | None:
        token = key if isinstance(key, str) else key_token(key)
        return self.categories.get(category, {}).get(token)

    def keys(self, category: str) -> list[str]:
        """Key tokens for one category in sorted order (empty for absent categories)."""
        return sorted(self.categories.get(category, {}))

    def records(self, category: str) -> list[EquipmentRecord]:
        bucket = self.categories.get(category, {})
        return [bucket[t] for t in sorted(bucket)]

    @property
    def category_names(self) -> list[str]:
        return sorted(self.categories)

    def record_count(self, category: str | None = None) -> int:
        if category is not None:
            return len(self.categories.get(category, {}))
        return sum(len(bucket) for bucket in self.categories.values())

    def copy_snapshot(self) -> "DatasetSnapshot":
        return self.model_copy(deep=True)

    def same_records(self, other: "DatasetSnapshot") -> bool:
        """Key-set and non-key value equality per category; absent categories count as empty."""
        for category in set(self.categories) | set(other.categories):
            mine = self.categories.get(category, {})
            theirs = other.categories.get(category, {})
            if set(mine) != set(theirs):
                return False
            for token, record in mine.items():
                if record.non_key_values() != theirs[token].non_key_values():
                    return False
        return True
