"""Source table column models and header normalization."""

from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, Field, model_validator

_SEPARATORS = re.compile(r"[\W_]+")
# Word boundaries inside a separator-free chunk: acronym runs, capitalized
# words, lower-case runs, digit runs, then anything non-ASCII.
_WORDS = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+|[^\W\d_A-Za-z]+")


def tokenize_header(text: str) -> list[str]:
    """Split a header into lower-case word tokens.

    Boundaries are punctuation, whitespace, underscores and case transitions,
    so ``"BusName"``, ``"BUS_NAME"`` and ``"bus name"`` all yield
    ``["bus", "name"]``.
    """
    tokens: list[str] = []
    for chunk in _SEPARATORS.split(text or ""):
        if not chunk:
            continue
        words = _WORDS.findall(chunk) or [chunk]
        tokens.extend(w.casefold() for w in words)
    return tokens


def normalize_header(text: str) -> str:
    """Lower-cased, punctuation-free form used for all header comparisons."""
    return "".join(tokenize_header(text))


class ColumnDescriptor(BaseModel):
    """One column header as it appears in a source table."""

    model_config = {"frozen": True}

    index: int
    header: str
    sample_values: tuple[str, ...] = ()

    @property
    def normalized_header(self) -> str:
        return normalize_header(self.header)

    @property
    def tokens(self) -> list[str]:
        return tokenize_header(self.header)


class ColumnSet(BaseModel):
    """Ordered, distinct column headers extracted from one table."""

    source_table: Optional[str] = None
    columns: list[ColumnDescriptor] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_distinct(self) -> "ColumnSet":
        seen: set[str] = set()
        for column in self.columns:
            header = column.header.strip()
            if header in seen:
                raise ValueError(f"Duplicate column header {column.header!r}")
            seen.add(header)
        return self

    @classmethod
    def from_headers(
        cls,
        headers: Iterable[str],
        source_table: str | None = None,
        samples: Sequence[Sequence[str]] | None = None,
    ) -> "ColumnSet":
        """Build a ColumnSet from raw header cells, skipping blank ones."""
        columns: list[ColumnDescriptor] = []
        for position, header in enumerate(headers):
            if header is None or not str(header).strip():
                continue
            sample = tuple(samples[position]) if samples and position < len(samples) else ()
            columns.append(ColumnDescriptor(index=position, header=str(header).strip(), sample_values=sample))
        return cls(source_table=source_table, columns=columns)

    @property
    def headers(self) -> list[str]:
        return [c.header for c in self.columns]

    def __len__(self) -> int:
        return len(self.columns)
