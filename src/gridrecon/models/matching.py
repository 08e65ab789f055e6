"""Auto-mapping proposal models."""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field

from gridrecon.models.catalog import CategoryCatalog
from gridrecon.models.mapping import MappingEntry


class MatchTier(StrEnum):
    CONFIRMED = "Confirmed"
    LOW_CONFIDENCE = "LowConfidence"
    NO_MATCH = "NoMatch"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]

    def demoted(self) -> "MatchTier":
        """One tier lower; NoMatch stays NoMatch."""
        if self is MatchTier.CONFIRMED:
            return MatchTier.LOW_CONFIDENCE
        return MatchTier.NO_MATCH


_TIER_RANK = {MatchTier.CONFIRMED: 0, MatchTier.LOW_CONFIDENCE: 1, MatchTier.NO_MATCH: 2}


class MatchReason(StrEnum):
    EXACT = "Exact"  # case-insensitive identical text
    NORMALIZED = "Normalized"  # identical after punctuation/case normalization
    ALIAS = "Alias"  # equals a declared alias after normalization
    FUZZY = "Fuzzy"  # blended edit-distance / Jaro-Winkler score
    NO_MATCH = "NoMatch"


class MatchCandidate(BaseModel):
    """A proposed column → property association."""

    model_config = {"frozen": True}

    column: str
    column_index: int
    normalized_column: str
    property_name: str
    score: float
    tier: MatchTier
    reason: MatchReason = MatchReason.FUZZY
    matched_term: str = ""  # property name or alias that produced the score
    assigned: bool = False  # selected by conflict resolution
    demoted: bool = False  # lowered one tier because either side was already claimed
    ambiguous: bool = False  # tied with an unclaimed competitor at the same score

    @property
    def display_text(self) -> str:
        return f"{self.column} -> {self.property_name} ({self.score:.0%}, {self.tier}, {self.reason})"


class MappingProposal(BaseModel):
    """Classified AutoMapper output for one category and one column set."""

    category: str
    source_table: Optional[str] = None
    candidates: list[MatchCandidate] = Field(default_factory=list)
    unmet_requirements: list[str] = Field(default_factory=list)

    def by_tier(self, tier: MatchTier) -> list[MatchCandidate]:
        return [c for c in self.candidates if c.tier == tier]

    @property
    def confirmed(self) -> list[MatchCandidate]:
        return self.by_tier(MatchTier.CONFIRMED)

    @property
    def low_confidence(self) -> list[MatchCandidate]:
        return self.by_tier(MatchTier.LOW_CONFIDENCE)

    @property
    def no_match(self) -> list[MatchCandidate]:
        return self.by_tier(MatchTier.NO_MATCH)

    @property
    def needs_review(self) -> bool:
        """True when a required property is unmet or a column lacks a Confirmed assignment
        but has a LowConfidence candidate."""
        if self.unmet_requirements:
            return True
        settled = {c.column_index for c in self.candidates if c.assigned and c.tier == MatchTier.CONFIRMED}
        return any(c.column_index not in settled for c in self.low_confidence)

    def to_mapping_entries(self, category: CategoryCatalog | None = None) -> list[MappingEntry]:
        """MappingEntry records for Confirmed candidates only."""
        entries: list[MappingEntry] = []
        for cand in self.confirmed:
            descriptor = category.get_property(cand.property_name) if category else None
            entries.append(
                MappingEntry(
                    category=self.category,
                    property_name=cand.property_name,
                    column_header=cand.column,
                    source_table=self.source_table,
                    required=descriptor.required if descriptor else False,
                    default_value=descriptor.default_value if descriptor else None,
                )
            )
        return entries
