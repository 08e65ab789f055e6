"""Tests for the import step (MappingConfiguration + rows -> DatasetSnapshot)."""

from __future__ import annotations

import pytest

from gridrecon.catalog.builtin import builtin_catalog
from gridrecon.core.exceptions import MappingConfigurationError, UnknownCategoryError
from gridrecon.models.mapping import MappingConfiguration, MappingEntry
from gridrecon.reconcile.importer import SnapshotBuilder, build_snapshot


def _entry(prop: str, header: str, category: str = "Bus", **kwargs) -> MappingEntry:
    return MappingEntry(category=category, property_name=prop, column_header=header, **kwargs)


@pytest.fixture
def catalog():
    return builtin_catalog()


@pytest.fixture
def config():
    return MappingConfiguration(entries=[
        _entry("Name", "Bus ID"),
        _entry("BaseKV", "kV"),
        _entry("NoOfPhases", "Phases"),
    ])


class TestBuildSnapshot:
    def test_maps_headers_to_properties(self, catalog, config):
        rows = [{"Bus ID": "B1", "kV": "13.8", "Phases": "3", "Ignored": "x"}]
        snapshot = build_snapshot("Bus", rows, config, catalog)
        record = snapshot.get("Bus", ("B1",))
        assert record.values == {"Name": "B1", "BaseKV": "13.8", "NoOfPhases": "3"}
        assert record.key_fields == ("Name",)

    def test_header_lookup_is_case_insensitive(self, catalog, config):
        snapshot = build_snapshot("bus", [{"BUS ID ": "B1", "KV": "4.16"}], config, catalog)
        assert snapshot.get("Bus", ("b1",)).values["BaseKV"] == "4.16"

    def test_default_value_fills_blank_cells(self, catalog, config):
        snapshot = build_snapshot("Bus", [{"Bus ID": "B1", "kV": "13.8", "Phases": ""}], config, catalog)
        assert snapshot.get("Bus", ("B1",)).values["NoOfPhases"] == "3"

    def test_entry_default_overrides_catalog_default(self, catalog):
        config = MappingConfiguration(entries=[_entry("Name", "Bus ID"), _entry("NoOfPhases", "Phases", default_value="1")])
        snapshot = build_snapshot("Bus", [{"Bus ID": "B1"}], config, catalog)
        assert snapshot.get("Bus", ("B1",)).values["NoOfPhases"] == "1"

    def test_numbers_converted_to_text(self, catalog, config):
        snapshot = build_snapshot("Bus", [{"Bus ID": 101, "kV": 12.47, "Phases": 3.0}], config, catalog)
        assert snapshot.get("Bus", ("101",)).values == {"Name": "101", "BaseKV": "12.47", "NoOfPhases": "3"}

    def test_row_without_key_skipped_with_warning(self, catalog, config):
        rows = [{"Bus ID": "", "kV": "13.8"}, {"Bus ID": "B2", "kV": "4.16"}]
        snapshot = build_snapshot("Bus", rows, config, catalog)
        assert snapshot.keys("Bus") == ["b2"]
        assert snapshot.warnings["Bus"][0] == "Row 1 skipped: blank key component(s): Name"

    def test_collision_later_row_wins(self, catalog, config):
        rows = [{"Bus ID": "B1", "kV": "13.8"}, {"Bus ID": "b1", "kV": "12.47"}]
        snapshot = build_snapshot("Bus", rows, config, catalog)
        assert snapshot.record_count("Bus") == 1
        assert snapshot.get("Bus", ("B1",)).values["BaseKV"] == "12.47"
        assert any("Duplicate key" in w for w in snapshot.warnings["Bus"])

    def test_field_failure_becomes_record_warning(self, catalog, config):
        rows = [{"Bus ID": "B1", "kV": float("inf")}]
        record = build_snapshot("Bus", rows, config, catalog).get("Bus", ("B1",))
        assert "BaseKV" not in record.values
        assert len(record.warnings) == 1
        assert record.warnings[0].startswith("BaseKV:")

    def test_missing_mapped_header_warned(self, catalog):
        config = MappingConfiguration(entries=[_entry("Name", "Bus ID"), _entry("Zone", "Zone")])
        snapshot = build_snapshot("Bus", [{"Bus ID": "B1"}], config, catalog)
        assert snapshot.warnings["Bus"] == ["Mapped column 'Zone' for Zone not found in source"]

    def test_unknown_property_ignored_with_warning(self, catalog):
        config = MappingConfiguration(entries=[_entry("Name", "Bus ID"), _entry("Colour", "Colour")])
        snapshot = build_snapshot("Bus", [{"Bus ID": "B1", "Colour": "red"}], config, catalog)
        assert snapshot.get("Bus", ("B1",)).values == {"Name": "B1"}
        assert "unknown property 'Colour'" in snapshot.warnings["Bus"][0]

    def test_composite_key(self, catalog):
        config = MappingConfiguration(entries=[
            _entry("Bus", "Arc Fault Bus Name", category="ArcFlash"),
            _entry("Scenario", "Scenario", category="ArcFlash"),
            _entry("IncidentEnergy", "Incident Energy", category="ArcFlash"),
        ])
        rows = [
            {"Arc Fault Bus Name": "SWGR-1", "Scenario": "Max", "Incident Energy": "8.2"},
            {"Arc Fault Bus Name": "SWGR-1", "Scenario": "Min", "Incident Energy": "3.1"},
        ]
        snapshot = build_snapshot("ArcFlash", rows, config, catalog)
        assert snapshot.record_count("ArcFlash") == 2
        assert snapshot.get("ArcFlash", ("swgr-1", "max")).values["IncidentEnergy"] == "8.2"

    def test_extends_existing_snapshot(self, catalog, config):
        builder = SnapshotBuilder(catalog, config)
        snapshot = builder.build("Bus", [{"Bus ID": "B1"}])
        fuse_config = MappingConfiguration(entries=[_entry("Name", "Fuses", category="Fuse")])
        SnapshotBuilder(catalog, fuse_config).build("Fuse", [{"Fuses": "F1"}], snapshot)
        assert snapshot.category_names == ["Bus", "Fuse"]

    def test_unknown_category(self, catalog, config):
        with pytest.raises(UnknownCategoryError):
            build_snapshot("Widget", [], config, catalog)

    def test_invalid_configuration_rejected(self, catalog):
        config = MappingConfiguration(entries=[_entry("Name", "")])
        with pytest.raises(MappingConfigurationError):
            SnapshotBuilder(catalog, config)
