"""Type aliases used across GridRecon."""

from __future__ import annotations

from typing import Any

Row = dict[str, Any]
NaturalKey = tuple[str, ...]
