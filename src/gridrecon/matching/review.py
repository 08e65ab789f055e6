"""Pure queries over a MappingConfiguration used to drive user review."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Iterable

from pydantic import BaseModel, Field

from gridrecon.core.exceptions import UnknownCategoryError
from gridrecon.models.catalog import PropertyCatalog
from gridrecon.models.columns import ColumnSet
from gridrecon.models.mapping import MappingConfiguration, MappingEntry

logger = logging.getLogger(__name__)


class MappingStatus(StrEnum):
    UNMAPPED = "Unmapped"
    PARTIAL = "Partial"
    COMPLETE = "Complete"


class RequiredMappingReport(BaseModel):
    """Required properties without a mapping, per category."""

    missing: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.missing

    @property
    def missing_count(self) -> int:
        return sum(len(v) for v in self.missing.values())

    def summary(self) -> str:
        if not self.missing:
            return "All required properties are mapped."
        lines = [f"{self.missing_count} required properties are not mapped:"]
        for category in sorted(self.missing):
            lines.append(f"{category}:")
            lines.extend(f"  - {name}" for name in sorted(self.missing[category]))
        return "\n".join(lines)


def _mapped_properties(config: MappingConfiguration, category: str) -> set[str]:
    return {e.property_name.casefold() for e in config.entries_for(category) if e.column_header.strip()}


def validate_required_mappings(
    config: MappingConfiguration,
    catalog: PropertyCatalog,
    enabled_categories: Iterable[str] | None = None,
) -> RequiredMappingReport:
    """Required properties of each enabled category that have no mapping entry.

    Categories default to every category declared in the catalog.
    """
    names = list(enabled_categories) if enabled_categories is not None else catalog.category_names
    report = RequiredMappingReport()
    for name in names:
        category = catalog.category(name)
        mapped = _mapped_properties(config, category.name)
        missing = [p for p in category.required_properties if p.casefold() not in mapped]
        if missing:
            report.missing[category.name] = missing
    if report.missing:
        logger.info("Required-mapping check: %d unmapped across %d categories", report.missing_count, len(report.missing))
    return report


def find_invalid_mappings(config: MappingConfiguration, catalog: PropertyCatalog) -> dict[str, list[MappingEntry]]:
    """Entries naming a property (or category) the catalog does not declare."""
    invalid: dict[str, list[MappingEntry]] = {}
    for entry in config.entries:
        try:
            category = catalog.category(entry.category)
        except UnknownCategoryError:
            invalid.setdefault(entry.category, []).append(entry)
            continue
        if category.get_property(entry.property_name) is None:
            invalid.setdefault(category.name, []).append(entry)
    for category, entries in sorted(invalid.items()):
        logger.info("Found %d invalid mappings for %s", len(entries), category)
    return invalid


def find_orphaned_mappings(
    config: MappingConfiguration,
    removed: ColumnSet | Iterable[ColumnSet],
) -> dict[str, list[MappingEntry]]:
    """Entries whose column header appears in a source table that is being removed."""
    column_sets = [removed] if isinstance(removed, ColumnSet) else list(removed)
    headers = {h.casefold() for cs in column_sets for h in cs.headers}
    orphaned: dict[str, list[MappingEntry]] = {}
    for entry in config.entries:
        if entry.column_header.casefold() in headers:
            orphaned.setdefault(entry.category, []).append(entry)
    return orphaned


def tables_in_use(
    config: MappingConfiguration,
    source_table: str,
    exclude_category: str | None = None,
) -> list[str]:
    """Categories, other than ``exclude_category``, already mapped from ``source_table``."""
    table = source_table.strip().casefold()
    excluded = exclude_category.strip().casefold() if exclude_category else None
    found = {
        e.category
        for e in config.entries
        if e.source_table
        and e.source_table.strip().casefold() == table
        and e.category.casefold() != excluded
    }
    return sorted(found)


def mapping_status(config: MappingConfiguration, catalog: PropertyCatalog, category: str) -> MappingStatus:
    """Unmapped when nothing is mapped, Complete when every required property is mapped."""
    declared = catalog.category(category)
    mapped = _mapped_properties(config, declared.name)
    if not mapped:
        return MappingStatus.UNMAPPED
    if all(p.casefold() in mapped for p in declared.required_properties):
        return MappingStatus.COMPLETE
    return MappingStatus.PARTIAL
