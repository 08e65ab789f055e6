"""MappingConfiguration models: confirmed column → property associations."""

from __future__ import annotations

from collections import Counter
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field


class MappingSeverity(StrEnum):
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"


class MappingEntry(BaseModel):
    """Maps one source column header to one category property."""

    category: str
    property_name: str
    column_header: str
    source_table: Optional[str] = None
    required: bool = False
    aliases: list[str] = Field(default_factory=list)
    severity: MappingSeverity = MappingSeverity.INFO
    default_value: Optional[str] = None

    @property
    def identity(self) -> tuple[str, str]:
        return (self.category.strip().casefold(), self.property_name.strip().casefold())


class MappingValidationResult(BaseModel):
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class MappingConfiguration(BaseModel):
    """Persisted, user-editable table of confirmed associations across categories."""

    software_version: str = ""
    map_version: Optional[str] = None
    entries: list[MappingEntry] = Field(default_factory=list)

    def normalize(self) -> None:
        for entry in self.entries:
            entry.category = (entry.category or "").strip()
            entry.property_name = (entry.property_name or "").strip()
            entry.column_header = (entry.column_header or "").strip()
            if entry.source_table is not None:
                entry.source_table = entry.source_table.strip() or None

    def validate_entries(self) -> MappingValidationResult:
        result = MappingValidationResult()
        counts = Counter(e.identity for e in self.entries)

        for (category, prop), n in sorted(counts.items()):
            if n > 1:
                result.warnings.append(
                    f"Duplicate mapping entries for {category}.{prop} (using first occurrence)."
                )

        for entry in self.entries:
            if not entry.category.strip() or not entry.property_name.strip() or not entry.column_header.strip():
                result.errors.append(
                    "Entry has blank category/property/column header: "
                    f"{entry.category!r}.{entry.property_name!r} <- {entry.column_header!r}"
                )

        reported: set[tuple[str, str]] = set()
        for entry in self.entries:
            if entry.required and counts[entry.identity] > 1 and entry.identity not in reported:
                reported.add(entry.identity)
                result.errors.append(f"Required mapping duplicated: {entry.category}.{entry.property_name}")
        return result

    def entries_for(self, category: str) -> list[MappingEntry]:
        """Entries for one category, first occurrence per property."""
        folded = category.strip().casefold()
        seen: set[tuple[str, str]] = set()
        out: list[MappingEntry] = []
        for entry in self.entries:
            if entry.identity[0] != folded or entry.identity in seen:
                continue
            seen.add(entry.identity)
            out.append(entry)
        return out

    def categories(self) -> list[str]:
        return sorted({e.category for e in self.entries if e.category})

    def set_entry(self, entry: MappingEntry) -> None:
        """Insert or replace the entry for (category, property)."""
        for i, existing in enumerate(self.entries):
            if existing.identity == entry.identity:
                self.entries[i] = entry
                return
        self.entries.append(entry)

    def remove_entry(self, category: str, property_name: str) -> bool:
        identity = (category.strip().casefold(), property_name.strip().casefold())
        before = len(self.entries)
        self.entries = [e for e in self.entries if e.identity != identity]
        return len(self.entries) != before
