"""Import step: apply a MappingConfiguration to raw rows to build a DatasetSnapshot.

A single bad cell never aborts the import. Conversion failures become
record-level warnings, rows with an incomplete natural key are skipped with a
snapshot warning, and key collisions are kept as snapshot warnings with the
later row winning.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable

from gridrecon.core.exceptions import MalformedRecordError, MappingConfigurationError
from gridrecon.core.types import Row
from gridrecon.models.catalog import CategoryCatalog, PropertyCatalog
from gridrecon.models.dataset import DatasetSnapshot, EquipmentRecord
from gridrecon.models.mapping import MappingConfiguration, MappingEntry

logger = logging.getLogger(__name__)


def _to_text(raw: Any) -> str:
    """Cell value as trimmed text; raises ValueError for values with no text form."""
    if raw is None:
        return ""
    if isinstance(raw, float):
        if math.isnan(raw):
            return ""
        if math.isinf(raw):
            raise ValueError(f"non-finite number {raw!r}")
        return str(int(raw)) if raw.is_integer() else str(raw)
    if isinstance(raw, bytes):
        return raw.decode("utf-8").strip()
    if isinstance(raw, (dict, list, tuple, set)):
        raise ValueError(f"unsupported cell type {type(raw).__name__}")
    return str(raw).strip()


class SnapshotBuilder:
    """Builds category records from header → value rows using confirmed mapping entries."""

    def __init__(self, catalog: PropertyCatalog, config: MappingConfiguration) -> None:
        result = config.validate_entries()
        if result.has_errors:
            raise MappingConfigurationError(result.errors)
        for warning in result.warnings:
            logger.warning("Mapping configuration: %s", warning)
        self._catalog = catalog
        self._config = config

    def build(
        self,
        category: str,
        rows: Iterable[Row],
        snapshot: DatasetSnapshot | None = None,
    ) -> DatasetSnapshot:
        """Add one category's rows to ``snapshot`` (a new one when omitted) and return it."""
        declared = self._catalog.category(category)
        snapshot = snapshot if snapshot is not None else DatasetSnapshot()
        entries = self._usable_entries(declared, snapshot)

        seen_headers: set[str] = set()
        imported = skipped = 0
        for row_number, row in enumerate(rows, start=1):
            folded = {str(k).strip().casefold(): v for k, v in row.items() if k is not None}
            seen_headers.update(folded)
            record = self._build_record(declared, entries, folded)
            try:
                record.check()
            except MalformedRecordError as exc:
                skipped += 1
                message = f"Row {row_number} skipped: {exc.reason}"
                snapshot.warn(declared.name, message)
                logger.warning("%s: %s", declared.name, message)
                continue
            snapshot.add(record)
            imported += 1

        for entry in entries.values():
            if entry.column_header.casefold() not in seen_headers and (imported or skipped):
                message = f"Mapped column {entry.column_header!r} for {entry.property_name} not found in source"
                snapshot.warn(declared.name, message)
                logger.warning("%s: %s", declared.name, message)

        logger.info("Imported %d %s records (%d skipped)", imported, declared.name, skipped)
        return snapshot

    def _usable_entries(self, declared: CategoryCatalog, snapshot: DatasetSnapshot) -> dict[str, MappingEntry]:
        """Property name → entry for entries naming a declared property."""
        usable: dict[str, MappingEntry] = {}
        for entry in self._config.entries_for(declared.name):
            prop = declared.get_property(entry.property_name)
            if prop is None:
                snapshot.warn(declared.name, f"Mapping for unknown property {entry.property_name!r} ignored")
                continue
            usable[prop.name] = entry
        return usable

    def _build_record(
        self,
        declared: CategoryCatalog,
        entries: dict[str, MappingEntry],
        folded_row: dict[str, Any],
    ) -> EquipmentRecord:
        values: dict[str, str] = {}
        warnings: list[str] = []
        for prop in declared.properties:
            entry = entries.get(prop.name)
            if entry is None:
                continue
            try:
                text = _to_text(folded_row.get(entry.column_header.casefold()))
            except ValueError as exc:
                warnings.append(f"{prop.name}: could not read value from {entry.column_header!r} ({exc})")
                text = ""
            if not text:
                text = entry.default_value or prop.default_value or ""
            if text:
                values[prop.name] = text
        return EquipmentRecord(
            category=declared.name,
            key_fields=declared.key_properties,
            values=values,
            warnings=warnings,
        )


def build_snapshot(
    category: str,
    rows: Iterable[Row],
    config: MappingConfiguration,
    catalog: PropertyCatalog,
    snapshot: DatasetSnapshot | None = None,
) -> DatasetSnapshot:
    """Convenience wrapper around SnapshotBuilder for a single category."""
    return SnapshotBuilder(catalog, config).build(category, rows, snapshot)
