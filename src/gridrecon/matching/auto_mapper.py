"""AutoMapper: proposes column → property associations for one category.

Every (column, property) pair is scored against the property name and each
declared alias, classified into a confidence tier, and then resolved with a
greedy one-to-one assignment. Pairs that lose a conflict are demoted one tier
instead of being dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gridrecon.core.config import MatchingConfig
from gridrecon.models.catalog import CategoryCatalog, PropertyCatalog, PropertyDescriptor
from gridrecon.models.columns import ColumnDescriptor, ColumnSet
from gridrecon.models.matching import MappingProposal, MatchCandidate, MatchReason, MatchTier
from gridrecon.matching.similarity import SimilarityScorer

logger = logging.getLogger(__name__)

_SHORT_CIRCUIT = (MatchReason.EXACT, MatchReason.NORMALIZED, MatchReason.ALIAS)


@dataclass
class _Pair:
    column: ColumnDescriptor
    normalized: str
    prop: PropertyDescriptor
    prop_order: int
    score: float
    reason: MatchReason
    term: str
    tier: MatchTier = MatchTier.NO_MATCH
    assigned: bool = False
    demoted: bool = False
    ambiguous: bool = False

    def sort_key(self) -> tuple:
        return (
            -self.score,
            len(self.normalized),
            self.column.header.casefold(),
            self.column.index,
            self.prop_order,
        )

    def to_candidate(self) -> MatchCandidate:
        return MatchCandidate(
            column=self.column.header,
            column_index=self.column.index,
            normalized_column=self.normalized,
            property_name=self.prop.name,
            score=self.score,
            tier=self.tier,
            reason=self.reason if self.tier != MatchTier.NO_MATCH or self.demoted else MatchReason.NO_MATCH,
            matched_term=self.term,
            assigned=self.assigned,
            demoted=self.demoted,
            ambiguous=self.ambiguous,
        )


class AutoMapper:
    """Scores, classifies and resolves column/property pairs into a MappingProposal."""

    def __init__(self, config: MatchingConfig | None = None, scorer: SimilarityScorer | None = None) -> None:
        self._config = config or MatchingConfig()
        self._scorer = scorer or SimilarityScorer(self._config)

    def classify(self, score: float) -> MatchTier:
        if score >= self._config.confirmed_threshold:
            return MatchTier.CONFIRMED
        if score >= self._config.low_confidence_threshold:
            return MatchTier.LOW_CONFIDENCE
        return MatchTier.NO_MATCH

    def propose(self, columns: ColumnSet, category: CategoryCatalog) -> MappingProposal:
        """Classified, conflict-resolved proposal. Never mutates any configuration."""
        pairs = [
            self._score_pair(column, prop, order)
            for column in columns.columns
            for order, prop in enumerate(category.properties)
        ]
        for pair in pairs:
            # Name and alias matches are Confirmed whatever the thresholds.
            pair.tier = MatchTier.CONFIRMED if pair.reason in _SHORT_CIRCUIT else self.classify(pair.score)

        eligible = sorted((p for p in pairs if p.tier != MatchTier.NO_MATCH), key=_Pair.sort_key)
        self._resolve(eligible, category.name)

        output = list(eligible)
        represented = {p.column.index for p in eligible}
        for column in columns.columns:
            if column.index in represented:
                continue
            best = _best_for_column(pairs, column.index)
            if best is not None:
                output.append(best)

        output.sort(key=lambda p: (p.tier.rank,) + p.sort_key())
        candidates = [p.to_candidate() for p in output]

        confirmed_props = {c.property_name for c in candidates if c.assigned and c.tier == MatchTier.CONFIRMED}
        unmet = [name for name in category.required_properties if name not in confirmed_props]

        proposal = MappingProposal(
            category=category.name,
            source_table=columns.source_table,
            candidates=candidates,
            unmet_requirements=unmet,
        )
        logger.info(
            "Proposal for %s: %d confirmed, %d low-confidence, %d no-match, unmet requirements: %s",
            category.name,
            len(proposal.confirmed),
            len(proposal.low_confidence),
            len(proposal.no_match),
            ", ".join(unmet) or "none",
        )
        return proposal

    def propose_for(self, columns: ColumnSet, catalog: PropertyCatalog, category: str) -> MappingProposal:
        """Look the category up first; raises UnknownCategoryError if it is not declared."""
        return self.propose(columns, catalog.category(category))

    def propose_all(self, column_sets: dict[str, ColumnSet], catalog: PropertyCatalog) -> dict[str, MappingProposal]:
        """One independent proposal per category, keyed by the catalog's category name."""
        proposals: dict[str, MappingProposal] = {}
        for name in sorted(column_sets):
            category = catalog.category(name)
            proposals[category.name] = self.propose(column_sets[name], category)
        return proposals

    def _score_pair(self, column: ColumnDescriptor, prop: PropertyDescriptor, order: int) -> _Pair:
        normalized = column.normalized_header
        best = _Pair(column, normalized, prop, order, 0.0, MatchReason.NO_MATCH, prop.name)
        for term, is_alias in [(prop.name, False)] + [(alias, True) for alias in prop.aliases]:
            value, reason = self._scorer.score_detail(column.header, term)
            if is_alias and reason in (MatchReason.EXACT, MatchReason.NORMALIZED):
                reason = MatchReason.ALIAS
            if value > best.score:
                best.score, best.reason, best.term = value, reason, term
            if value >= 1.0:
                break
        return best

    def _resolve(self, ordered: list[_Pair], category: str) -> None:
        """Greedy one-to-one assignment over pairs already in priority order."""
        claimed_columns: set[int] = set()
        claimed_props: set[str] = set()
        for position, pair in enumerate(ordered):
            if pair.column.index in claimed_columns or pair.prop.name in claimed_props:
                pair.tier = pair.tier.demoted()
                pair.demoted = True
                logger.debug(
                    "%s: demoted %r -> %s to %s (already claimed)",
                    category, pair.column.header, pair.prop.name, pair.tier,
                )
                continue
            if _has_open_tie(ordered, position, claimed_columns, claimed_props):
                pair.ambiguous = True
                if pair.reason not in _SHORT_CIRCUIT and pair.tier == MatchTier.CONFIRMED:
                    pair.tier = MatchTier.LOW_CONFIDENCE
                logger.debug("%s: %r -> %s tied with a competitor", category, pair.column.header, pair.prop.name)
            pair.assigned = True
            claimed_columns.add(pair.column.index)
            claimed_props.add(pair.prop.name)


def _has_open_tie(ordered: list[_Pair], position: int, claimed_columns: set[int], claimed_props: set[str]) -> bool:
    """True if a later pair with the same score competes for one side of this pair."""
    pair = ordered[position]
    for other in ordered[position + 1:]:
        if other.score != pair.score:
            break
        same_column = other.column.index == pair.column.index
        same_prop = other.prop.name == pair.prop.name
        if same_column and not same_prop and other.prop.name not in claimed_props:
            return True
        if same_prop and not same_column and other.column.index not in claimed_columns:
            return True
    return False


def _best_for_column(pairs: list[_Pair], column_index: int) -> _Pair | None:
    best: _Pair | None = None
    for pair in pairs:
        if pair.column.index != column_index:
            continue
        if best is None or pair.score > best.score:
            best = pair
    return best

