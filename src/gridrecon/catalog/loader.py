"""Load a PropertyCatalog from JSON or fall back to the built-in declaration."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from gridrecon.catalog.builtin import builtin_catalog
from gridrecon.core.exceptions import MalformedDescriptorError
from gridrecon.models.catalog import PropertyCatalog

logger = logging.getLogger(__name__)


def load_catalog(source: str | Path | dict[str, Any]) -> PropertyCatalog:
    """Build a catalog from a JSON file path or an already-parsed dict.

    Raises:
        MalformedDescriptorError: if the file is not valid JSON or any
            descriptor is invalid.
    """
    if isinstance(source, dict):
        data = source
    else:
        path = Path(source)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise MalformedDescriptorError(f"Catalog file {path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise MalformedDescriptorError(f"Catalog file {path} must contain a JSON object")
    catalog = PropertyCatalog.from_dict(data)
    logger.info("Loaded property catalog with %d categories", len(catalog.categories))
    return catalog


def default_catalog(path: str | Path | None = None) -> PropertyCatalog:
    """The JSON catalog at ``path`` when given, otherwise the built-in one."""
    if path is None:
        return builtin_catalog()
    return load_catalog(path)
