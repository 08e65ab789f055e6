"""Tests for AutoMapper proposal, classification and conflict resolution."""

from __future__ import annotations

import pytest

from gridrecon.catalog.builtin import builtin_catalog
from gridrecon.core.config import MatchingConfig
from gridrecon.core.exceptions import UnknownCategoryError
from gridrecon.matching.auto_mapper import AutoMapper
from gridrecon.models.catalog import CategoryCatalog, PropertyDescriptor
from gridrecon.models.columns import ColumnSet
from gridrecon.models.matching import MatchReason, MatchTier


def _category(*props: PropertyDescriptor) -> CategoryCatalog:
    key = PropertyDescriptor(name="Name", is_key_component=True, required=True, aliases=("BusName",))
    return CategoryCatalog(name="Bus", properties=(key, *props))


@pytest.fixture
def mapper():
    return AutoMapper()


def _by_column(proposal, header):
    return [c for c in proposal.candidates if c.column == header]


class TestScenario:
    def test_bus_name_header_confirms_name(self, mapper):
        catalog = builtin_catalog()
        proposal = mapper.propose_for(ColumnSet.from_headers(["BUS_NAME"]), catalog, "Bus")
        match = _by_column(proposal, "BUS_NAME")[0]
        assert match.property_name == "Name"
        assert match.tier == MatchTier.CONFIRMED
        assert match.score >= 0.60
        assert match.reason == MatchReason.ALIAS
        assert match.assigned


class TestClassification:
    def test_exact_match_confirmed_regardless_of_thresholds(self):
        strict = AutoMapper(MatchingConfig(confirmed_threshold=1.0, low_confidence_threshold=1.0))
        proposal = strict.propose(ColumnSet.from_headers(["name", "Bus Name"]), _category())
        tiers = {c.column: c.tier for c in proposal.candidates if c.assigned}
        assert tiers["name"] == MatchTier.CONFIRMED

    def test_fuzzy_match_confirmed_at_default_thresholds(self, mapper):
        cat = _category(PropertyDescriptor(name="BusRatingA"))
        proposal = mapper.propose(ColumnSet.from_headers(["Bus Rating"]), cat)
        match = _by_column(proposal, "Bus Rating")[0]
        assert match.property_name == "BusRatingA"
        assert match.tier == MatchTier.CONFIRMED
        assert match.reason == MatchReason.FUZZY

    def test_fuzzy_match_low_confidence_with_raised_threshold(self):
        mapper = AutoMapper(MatchingConfig(confirmed_threshold=0.95, low_confidence_threshold=0.5))
        cat = _category(PropertyDescriptor(name="BusRatingA"))
        proposal = mapper.propose(ColumnSet.from_headers(["Bus Rating"]), cat)
        match = _by_column(proposal, "Bus Rating")[0]
        assert match.tier == MatchTier.LOW_CONFIDENCE
        assert proposal.needs_review

    def test_unrelated_column_is_no_match(self, mapper):
        cat = _category(PropertyDescriptor(name="BusRating"))
        proposal = mapper.propose(ColumnSet.from_headers(["Name", "QTY"]), cat)
        qty = _by_column(proposal, "QTY")
        assert len(qty) == 1
        assert qty[0].tier == MatchTier.NO_MATCH
        assert qty[0].reason == MatchReason.NO_MATCH
        assert not qty[0].assigned


class TestConflictResolution:
    def test_loser_is_demoted_not_dropped(self, mapper):
        cat = _category(PropertyDescriptor(name="BusRating"))
        proposal = mapper.propose(ColumnSet.from_headers(["Name", "BusRating", "BusRatings"]), cat)
        winner = [c for c in proposal.candidates if c.property_name == "BusRating" and c.assigned]
        assert [c.column for c in winner] == ["BusRating"]
        loser = [c for c in _by_column(proposal, "BusRatings") if c.property_name == "BusRating"][0]
        assert loser.demoted
        assert not loser.assigned
        assert loser.tier == MatchTier.LOW_CONFIDENCE

    def test_assignment_is_one_to_one(self, mapper):
        catalog = builtin_catalog()
        headers = ["Buses", "Bus Name", "Base kV", "Voltage", "kV", "No of Phases", "Phases", "Status", "Mfr"]
        proposal = mapper.propose_for(ColumnSet.from_headers(headers), catalog, "Bus")
        assigned = [c for c in proposal.candidates if c.assigned]
        assert len({c.column for c in assigned}) == len(assigned)
        assert len({c.property_name for c in assigned}) == len(assigned)

    def test_identical_scores_surface_as_low_confidence(self, mapper):
        cat = _category(PropertyDescriptor(name="RatingA"), PropertyDescriptor(name="RatingB"))
        proposal = mapper.propose(ColumnSet.from_headers(["Name", "Rating"]), cat)
        rating = _by_column(proposal, "Rating")
        winner = [c for c in rating if c.assigned][0]
        assert winner.property_name == "RatingA"  # declaration order breaks the tie
        assert winner.ambiguous
        assert winner.tier == MatchTier.LOW_CONFIDENCE
        other = [c for c in rating if c.property_name == "RatingB"][0]
        assert other.demoted and other.tier == MatchTier.LOW_CONFIDENCE

    def test_shorter_header_wins_tie(self, mapper):
        cat = _category(PropertyDescriptor(name="Zone", aliases=("Zone ID",)))
        proposal = mapper.propose(ColumnSet.from_headers(["Zone ID", "ZONE"]), cat)
        winner = [c for c in proposal.candidates if c.property_name == "Zone" and c.assigned][0]
        assert winner.column == "ZONE"


class TestOutput:
    def test_ordered_by_tier_then_score(self, mapper):
        catalog = builtin_catalog()
        headers = ["Buses", "Base kV", "Bus Ratng", "Phase Count", "Comments", "QTY"]
        proposal = mapper.propose_for(ColumnSet.from_headers(headers), catalog, "Bus")
        ranks = [(c.tier.rank, -c.score) for c in proposal.candidates]
        assert ranks == sorted(ranks)

    def test_unmet_requirements(self, mapper):
        catalog = builtin_catalog()
        proposal = mapper.propose_for(ColumnSet.from_headers(["Bus Name"]), catalog, "Bus")
        assert proposal.unmet_requirements == ["BaseKV"]
        assert proposal.needs_review

    def test_all_requirements_met(self, mapper):
        catalog = builtin_catalog()
        proposal = mapper.propose_for(ColumnSet.from_headers(["Bus Name", "Base kV"]), catalog, "Bus")
        assert proposal.unmet_requirements == []
        assert not proposal.needs_review

    def test_to_mapping_entries_only_confirmed(self, mapper):
        catalog = builtin_catalog()
        bus = catalog.category("Bus")
        proposal = mapper.propose(ColumnSet.from_headers(["BUS_NAME", "Base kV", "QTY"], source_table="Buses"), bus)
        entries = proposal.to_mapping_entries(bus)
        assert {(e.property_name, e.column_header) for e in entries} == {("Name", "BUS_NAME"), ("BaseKV", "Base kV")}
        assert all(e.source_table == "Buses" and e.category == "Bus" for e in entries)
        assert all(e.required for e in entries)

    def test_deterministic(self, mapper):
        catalog = builtin_catalog()
        columns = ColumnSet.from_headers(["Buses", "Base kV", "Bus Ratng", "Status", "Zone", "Area"])
        first = mapper.propose_for(columns, catalog, "Bus")
        second = mapper.propose_for(columns, catalog, "Bus")
        assert first == second

    def test_does_not_mutate_inputs(self, mapper):
        catalog = builtin_catalog()
        columns = ColumnSet.from_headers(["Buses", "Base kV"])
        before = columns.model_copy(deep=True)
        mapper.propose_for(columns, catalog, "Bus")
        assert columns == before


class TestProposeAll:
    def test_independent_per_category(self, mapper):
        catalog = builtin_catalog()
        sets = {
            "Bus": ColumnSet.from_headers(["Bus Name", "Base kV"]),
            "fuse": ColumnSet.from_headers(["Fuses", "On Bus"]),
        }
        proposals = mapper.propose_all(sets, catalog)
        assert set(proposals) == {"Bus", "Fuse"}
        assert proposals["Bus"] == mapper.propose(sets["Bus"], catalog.category("Bus"))

    def test_unknown_category(self, mapper):
        with pytest.raises(UnknownCategoryError):
            mapper.propose_all({"Nope": ColumnSet.from_headers(["A"])}, builtin_catalog())
