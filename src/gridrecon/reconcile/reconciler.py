"""DatasetReconciler: per-category diff of two snapshots and atomic commit."""

from __future__ import annotations

import logging
import math
import re

from gridrecon.core.config import ReconcileConfig
from gridrecon.core.exceptions import CommitError, MalformedRecordError, UnknownCategoryError
from gridrecon.models.catalog import PropertyCatalog
from gridrecon.models.changeset import CategoryChangeSet, ChangeSet, FieldDelta, ModifiedRecord
from gridrecon.models.dataset import DatasetSnapshot, EquipmentRecord

logger = logging.getLogger(__name__)

_UNIT_SUFFIX = re.compile(r"\s*(?:cal/cm\^?2|cal/cm²|ka|a)\s*$", re.IGNORECASE)


class ValueComparator:
    """Field value equality: strict text, or numeric within a relative tolerance."""

    def __init__(self, numeric_tolerance: float | None = None, strip_units: bool = True) -> None:
        self.numeric_tolerance = numeric_tolerance
        self.strip_units = strip_units

    @classmethod
    def from_config(cls, config: ReconcileConfig) -> "ValueComparator":
        return cls(numeric_tolerance=config.numeric_tolerance, strip_units=config.strip_units)

    def equal(self, old: str | None, new: str | None) -> bool:
        if old == new:
            return True
        if self.numeric_tolerance is None:
            return False
        left, right = (old or "").strip(), (new or "").strip()
        if left == right:
            return True
        a, b = self._as_number(left), self._as_number(right)
        if a is None or b is None:
            return False
        return abs(a - b) <= self.numeric_tolerance * max(1.0, abs(a), abs(b))

    def _as_number(self, text: str) -> float | None:
        cleaned = text.replace(",", "")
        if self.strip_units:
            cleaned = _UNIT_SUFFIX.sub("", cleaned)
        try:
            value = float(cleaned)
        except ValueError:
            return None
        return value if math.isfinite(value) else None


def _rekeyed(snapshot: DatasetSnapshot, category: str) -> dict[str, EquipmentRecord]:
    """Records by canonical key token, whatever tokens the snapshot was stored under."""
    return {record.token: record for record in snapshot.categories.get(category, {}).values()}


class DatasetReconciler:
    """Computes ChangeSets between snapshots and commits them all-or-nothing."""

    def __init__(
        self,
        catalog: PropertyCatalog | None = None,
        comparator: ValueComparator | None = None,
    ) -> None:
        self._catalog = catalog
        self._comparator = comparator or ValueComparator()

    @classmethod
    def from_config(cls, config: ReconcileConfig, catalog: PropertyCatalog | None = None) -> "DatasetReconciler":
        return cls(catalog=catalog, comparator=ValueComparator.from_config(config))

    def diff(self, current: DatasetSnapshot, incoming: DatasetSnapshot) -> ChangeSet:
        """Pure comparison; a category absent from one side counts as empty there.

        Categories that only carry incoming warnings (every row rejected) are
        still reported.
        """
        change_set = ChangeSet()
        for category in sorted(set(current.categories) | set(incoming.categories) | set(incoming.warnings)):
            change_set.categories[category] = self.diff_category(category, current, incoming)
        return change_set

    def diff_category(self, category: str, current: DatasetSnapshot, incoming: DatasetSnapshot) -> CategoryChangeSet:
        before = _rekeyed(current, category)
        after = _rekeyed(incoming, category)
        result = CategoryChangeSet(category=category, warnings=list(incoming.warnings.get(category, [])))

        for token in sorted(after.keys() - before.keys()):
            result.added[token] = after[token]
        for token in sorted(before.keys() - after.keys()):
            result.removed[token] = before[token].display_key
        for token in sorted(before.keys() & after.keys()):
            deltas = self._field_deltas(category, before[token], after[token])
            if deltas:
                result.modified[token] = ModifiedRecord(
                    key=token,
                    display_key=after[token].display_key,
                    record=after[token],
                    deltas=deltas,
                )
            else:
                result.unchanged[token] = before[token].display_key

        for token in sorted(result.added.keys() | result.modified.keys()):
            record = after[token]
            result.warnings.extend(f"{record.display_key}: {w}" for w in record.warnings)

        logger.info(
            "Diff %s: %d added, %d removed, %d modified, %d unchanged",
            category, len(result.added), len(result.removed), len(result.modified), len(result.unchanged),
        )
        return result

    def _field_deltas(self, category: str, old: EquipmentRecord, new: EquipmentRecord) -> list[FieldDelta]:
        key_fields = set(old.key_fields) | set(new.key_fields)
        names = (set(old.values) | set(new.values)) - key_fields
        deltas: list[FieldDelta] = []
        for name in sorted(names, key=self._field_order(category)):
            before, after = old.values.get(name), new.values.get(name)
            if not self._comparator.equal(before, after):
                deltas.append(FieldDelta(field=name, old=before, new=after))
        return deltas

    def _field_order(self, category: str):
        """Sort key: catalog declaration order first, then undeclared fields by name."""
        declared: tuple[str, ...] = ()
        if self._catalog is not None and category in self._catalog:
            declared = self._catalog.category(category).property_names
        position = {name: i for i, name in enumerate(declared)}
        return lambda name: (position.get(name, len(position)), name)

    def commit(self, current: DatasetSnapshot, change_set: ChangeSet, prune_removed: bool = True) -> DatasetSnapshot:
        """Apply ``change_set`` to a copy of ``current`` and return the copy.

        Added and Modified records are upserted; Removed keys are deleted only
        when ``prune_removed`` is set.

        Raises:
            CommitError: if any category fails to apply. It carries the
                original, unmodified ``current`` snapshot.
        """
        working = current.copy_snapshot()
        for category in change_set.category_names:
            try:
                self._apply(working, change_set.categories[category], prune_removed)
            except (MalformedRecordError, UnknownCategoryError) as exc:
                logger.error("Commit aborted in %s: %s", category, exc)
                raise CommitError(category, str(exc), current) from exc
        logger.info(
            "Committed %d categories (%s mode)",
            len(change_set.categories), "diff merge" if prune_removed else "additive",
        )
        return working

    def _apply(self, working: DatasetSnapshot, changes: CategoryChangeSet, prune_removed: bool) -> None:
        category = changes.category
        bucket = _rekeyed(working, category)
        upserts = [changes.added[t] for t in changes.added_keys]
        upserts += [changes.modified[t].record for t in changes.modified_keys]
        for record in upserts:
            self._check_record(category, record)
            bucket[record.token] = record.model_copy(deep=True)
        if prune_removed:
            for token in changes.removed_keys:
                bucket.pop(token, None)
        if bucket:
            working.categories[category] = bucket
        else:
            working.categories.pop(category, None)

    def _check_record(self, category: str, record: EquipmentRecord) -> None:
        if record.category != category:
            raise MalformedRecordError(category, f"record tagged {record.category!r} in {category!r} changes")
        record.check()
        if self._catalog is not None:
            declared = self._catalog.category(category)
            if tuple(record.key_fields) != declared.key_properties:
                raise MalformedRecordError(
                    category,
                    f"key fields {list(record.key_fields)} do not match {list(declared.key_properties)}",
                )
