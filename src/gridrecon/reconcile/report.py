"""Human-readable change report. Output is byte-identical for identical input."""

from __future__ import annotations

from gridrecon.models.changeset import CategoryChangeSet, ChangeSet


def _show(value: str | None) -> str:
    return "<blank>" if value is None or value == "" else repr(value)


def render_category(changes: CategoryChangeSet) -> list[str]:
    counts = changes.counts()
    lines = [
        f"{changes.category}: {counts['added']} added, {counts['removed']} removed, "
        f"{counts['modified']} modified, {counts['unchanged']} unchanged"
    ]
    for token in changes.added_keys:
        lines.append(f"  + {changes.added[token].display_key}")
    for token in changes.removed_keys:
        lines.append(f"  - {changes.removed[token]}")
    for token in changes.modified_keys:
        modified = changes.modified[token]
        lines.append(f"  ~ {modified.display_key}")
        for delta in modified.deltas:
            lines.append(f"      {delta.field}: {_show(delta.old)} -> {_show(delta.new)}")
    for warning in changes.warnings:
        lines.append(f"  ! {warning}")
    return lines


def render_change_report(change_set: ChangeSet) -> str:
    """Sorted categories, sorted keys and field deltas, one item per line."""
    if not change_set.categories:
        return "No changes.\n"
    lines: list[str] = []
    for name in change_set.category_names:
        lines.extend(render_category(change_set.categories[name]))
    return "\n".join(lines) + "\n"
