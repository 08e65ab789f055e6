"""Similarity Scorer: normalized [0, 1] similarity between two header tokens.

The fuzzy score blends a normalized Levenshtein similarity with a
Jaro-Winkler similarity, both from rapidfuzz. Inputs are normalized first
(case-folded, punctuation stripped, split on case/underscore boundaries), and
identical normalized forms short-circuit to 1.0.
"""

from __future__ import annotations

from rapidfuzz.distance import JaroWinkler, Levenshtein

from gridrecon.core.config import MatchingConfig
from gridrecon.models.columns import normalize_header
from gridrecon.models.matching import MatchReason


class SimilarityScorer:
    """Weighted edit-distance / affix similarity with the configured weights."""

    def __init__(self, config: MatchingConfig | None = None) -> None:
        self._config = config or MatchingConfig()

    @property
    def config(self) -> MatchingConfig:
        return self._config

    def score(self, a: str, b: str) -> float:
        return self.score_detail(a, b)[0]

    def score_detail(self, a: str, b: str) -> tuple[float, MatchReason]:
        raw_a, raw_b = (a or "").strip().casefold(), (b or "").strip().casefold()
        if raw_a and raw_a == raw_b:
            return 1.0, MatchReason.EXACT
        left, right = normalize_header(raw_a), normalize_header(raw_b)
        if not left or not right:
            return 0.0, MatchReason.NO_MATCH
        if left == right:
            return 1.0, MatchReason.NORMALIZED
        return self.fuzzy(left, right), MatchReason.FUZZY

    def fuzzy(self, left: str, right: str) -> float:
        """Blend of both sub-scores for already-normalized strings."""
        if right < left:
            left, right = right, left
        cfg = self._config
        edit = Levenshtein.normalized_similarity(left, right)
        affix = JaroWinkler.similarity(left, right, prefix_weight=cfg.prefix_weight)
        blended = (cfg.edit_weight * edit + cfg.affix_weight * affix) / (cfg.edit_weight + cfg.affix_weight)
        return min(1.0, max(0.0, blended))


_default_scorer = SimilarityScorer()


def score(a: str, b: str) -> float:
    """Similarity of ``a`` and ``b`` in [0, 1] using the default weights."""
    return _default_scorer.score(a, b)


def score_detail(a: str, b: str) -> tuple[float, MatchReason]:
    return _default_scorer.score_detail(a, b)
