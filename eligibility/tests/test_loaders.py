"""
Tests for Rule Loaders

Reference CSV, record/JSON input with legacy keys, and error reporting.

Run with: pytest eligibility/tests/ -v
"""

import json

import pytest

from eligibility.data import (
    DEFAULT_RULES_FILE,
    load_rule_table,
    load_rules_csv,
    load_rules_json,
    rule_table_to_records,
    rules_from_frame,
    rules_from_records,
    write_rules_csv,
    write_rules_json,
)
from eligibility.data.loaders.csv_table import format_box, parse_box
from eligibility.data.loaders.json_records import normalize_constraints
from eligibility.data.reference import CSV_COLUMNS
from eligibility.errors import MalformedRuleError
from eligibility.model import CombinedDimensions, sort_descending


HEADER = ",".join(CSV_COLUMNS)


def write_csv(tmp_path, *rows: str):
    path = tmp_path / "rules.csv"
    path.write_text("\n".join([HEADER, *rows]) + "\n", encoding="utf-8")
    return path


# =============================================================================
# REFERENCE TABLE TESTS
# =============================================================================

class TestReferenceTable:
    """Tests for the bundled services.csv."""

    @pytest.fixture(scope="class")
    def table(self):
        return load_rule_table()

    def test_loads(self, table):
        assert len(table) == 70
        assert len(table.services()) == 70

    def test_carriers(self, table):
        assert set(table.carriers) == {"EVRI", "AMAZON", "UPS", "FEDEX", "ROYAL", "DHL", "USPS"}

    def test_box_fit_envelope(self, table):
        rule = next(r for r in table if r.service_id == "amazon_large_letter")
        assert rule.validation_type == "box_fit"
        assert rule.constraints.box_max_mm == (353, 250, 25)
        assert rule.constraints.weight_max_g == 750

    def test_min_envelope_and_circumference(self, table):
        rule = next(r for r in table if r.service_id == "dhl_service_point")
        c = rule.constraints
        assert c.box_max_mm is None
        assert sort_descending(c.box_min_mm) == (150, 110, 20)
        assert c.combined_dimensions == CombinedDimensions(max_mm=3000, method="circumference")

    def test_girth_limits(self, table):
        rule = next(r for r in table if r.service_id == "evri_light_large")
        c = rule.constraints
        assert (c.weight_min_g, c.weight_max_g) == (15000, 30000)
        assert c.max_girth_mm == 2400
        assert c.max_length_plus_girth_mm == 4200

    def test_no_custom_methods(self, table):
        for rule in table:
            combined = rule.constraints.combined_dimensions
            assert combined is None or combined.method != "custom"

    def test_default_path(self):
        assert DEFAULT_RULES_FILE.name == "services.csv"
        assert DEFAULT_RULES_FILE.exists()


# =============================================================================
# CSV TESTS
# =============================================================================

class TestCsvLoader:
    """Tests for CSV parsing and error reporting."""

    def test_parse_box(self):
        assert parse_box("350x230x30") == [350.0, 230.0, 30.0]
        assert parse_box(" 353X250X25 ") == [353.0, 250.0, 25.0]
        assert parse_box(None) is None
        assert parse_box("  ") is None

    def test_parse_box_garbage(self):
        with pytest.raises(MalformedRuleError, match="not LxWxH"):
            parse_box("350 by 230")

    def test_format_box(self):
        assert format_box((350.0, 230.0, 30.0)) == "350x230x30"
        assert format_box((350.5, 230, 30)) == "350.5x230x30"
        assert format_box(None) is None

    def test_minimal_row(self, tmp_path):
        path = write_csv(tmp_path, "x_parcel,X Parcel,X,dimension_limits,,1000,,,,,,,")
        table = load_rules_csv(path)
        assert table.service_ids == ("x_parcel",)
        assert table[0].constraints.weight_max_g == 1000

    def test_repeated_rows_are_alternatives(self, tmp_path):
        path = write_csv(
            tmp_path,
            "x_parcel,X Parcel,X,dimension_limits,,30000,1200,2250,standard_sum,,,,",
            "x_parcel,X Parcel,X,oversized,,30000,1800,,,,,,",
        )
        services = load_rules_csv(path).services()
        assert len(services) == 1
        assert len(services[0].rules) == 2

    def test_all_bad_rows_reported(self, tmp_path):
        path = write_csv(
            tmp_path,
            "two_entry_box,A,X,box_fit,,750,,,,,,353x250,",
            "custom_method,B,X,dimension_limits,,1000,,2000,custom,,,,",
            "negative_weight,C,X,dimension_limits,,-5,,,,,,,",
            "good,D,X,dimension_limits,,1000,,,,,,,",
        )
        with pytest.raises(MalformedRuleError) as exc:
            load_rules_csv(path)
        message = str(exc.value)
        assert "row 1" in message and "'two_entry_box'" in message
        assert "row 2" in message and "has no formula" in message
        assert "row 3" in message and "cannot be negative" in message
        assert "row 4" not in message

    def test_combined_max_without_method(self, tmp_path):
        path = write_csv(tmp_path, "x,X,X,dimension_limits,,,,2000,,,,,")
        with pytest.raises(MalformedRuleError, match="both max_mm and method"):
            load_rules_csv(path)

    def test_unknown_validation_type(self, tmp_path):
        path = write_csv(tmp_path, "x,X,X,envelope,,,,,,,,,")
        with pytest.raises(MalformedRuleError, match="validation_type"):
            load_rules_csv(path)

    def test_unparseable_number(self, tmp_path):
        path = write_csv(tmp_path, "x,X,X,dimension_limits,,lots,,,,,,,")
        with pytest.raises(MalformedRuleError, match="rules.csv"):
            load_rule_table(path)

    def test_unknown_column(self, tmp_path):
        path = tmp_path / "rules.csv"
        path.write_text(HEADER + ",surcharge\nx,X,X,box_fit,,,,,,,,,,5\n", encoding="utf-8")
        with pytest.raises(MalformedRuleError, match="unknown column"):
            load_rules_csv(path)

    def test_frame_round_trip(self):
        table = load_rule_table()
        again = rules_from_frame(table.to_frame())
        assert again.rules == table.rules

    def test_write_csv(self, tmp_path):
        table = load_rule_table().filter(carrier="ROYAL")
        path = tmp_path / "royal.csv"
        write_rules_csv(table, path)
        assert load_rules_csv(path).rules == table.rules


# =============================================================================
# RECORD / JSON TESTS
# =============================================================================

class TestRecordLoader:
    """Tests for record input, legacy keys and alternatives."""

    def test_legacy_keys(self):
        raw = {
            "weight_max_g": 1000,
            "max_combined_dimensions_mm": 900,
            "combined_calculation_method": "standard_sum",
            "box_dimensions_mm": [350, 230, 30],
            "box_dimensions_min_mm": [10, 10, 1],
        }
        assert normalize_constraints(raw) == {
            "weight_max_g": 1000,
            "combined_dimensions": {"max_mm": 900, "method": "standard_sum"},
            "box_max_mm": [350, 230, 30],
            "box_min_mm": [10, 10, 1],
        }

    def test_legacy_and_current_conflict(self):
        with pytest.raises(MalformedRuleError, match="both box_dimensions_mm and box_max_mm"):
            normalize_constraints({"box_dimensions_mm": [1, 2, 3], "box_max_mm": [1, 2, 3]})

    def test_legacy_record(self):
        table = rules_from_records([{
            "service_id": "evri_48_packets",
            "service_name": "EVRI 48 Packets",
            "carrier": "EVRI",
            "validation_type": "box_fit",
            "constraints": {"weight_max_g": 2000, "box_dimensions_mm": [350, 230, 30]},
        }])
        assert table[0].constraints.box_max_mm == (350, 230, 30)

    def test_alternative_constraints(self):
        table = rules_from_records([{
            "service_id": "ups_standard",
            "service_name": "UPS Standard",
            "carrier": "UPS",
            "validation_type": "dimension_limits",
            "constraints": {"weight_max_g": 30000, "max_single_dimension_mm": 1000},
            "alternative_constraints": [
                {"max_single_dimension_mm": 2700, "max_length_plus_girth_mm": 4000},
                {"validation_type": "oversized", "max_girth_mm": 3000},
            ],
        }])
        assert len(table) == 3
        assert table.service_ids == ("ups_standard",)
        assert [r.validation_type for r in table] == ["dimension_limits", "dimension_limits", "oversized"]
        assert table[1].constraints.weight_max_g is None

    def test_alternatives_must_be_list(self):
        with pytest.raises(MalformedRuleError, match="must be a list"):
            rules_from_records([{
                "service_id": "x",
                "service_name": "X",
                "carrier": "X",
                "validation_type": "box_fit",
                "alternative_constraints": {"weight_max_g": 1},
            }])

    def test_unknown_record_field(self):
        with pytest.raises(MalformedRuleError, match="price"):
            rules_from_records([{
                "service_id": "x",
                "service_name": "X",
                "carrier": "X",
                "validation_type": "box_fit",
                "price": 3.5,
            }])

    def test_errors_name_record_index(self):
        good = {"service_id": "a", "service_name": "A", "carrier": "X", "validation_type": "box_fit"}
        bad = {"service_id": "b", "service_name": "B", "carrier": "X", "validation_type": "box_fit",
               "constraints": {"box_max_mm": [1, 2]}}
        with pytest.raises(MalformedRuleError, match="record 1"):
            rules_from_records([good, bad])

    def test_load_json_list_and_mapping(self, tmp_path):
        record = {
            "service_id": "royal_mail_large_letter",
            "service_name": "Royal Mail Large Letter",
            "carrier": "ROYAL",
            "validation_type": "box_fit",
            "constraints": {"weight_max_g": 750, "box_max_mm": [353, 250, 25]},
        }
        as_list = tmp_path / "list.json"
        as_list.write_text(json.dumps([record]), encoding="utf-8")
        as_mapping = tmp_path / "mapping.json"
        as_mapping.write_text(json.dumps({"services": [record]}), encoding="utf-8")

        assert load_rules_json(as_list).rules == load_rules_json(as_mapping).rules
        assert load_rule_table(as_list).service_ids == ("royal_mail_large_letter",)

    def test_load_json_invalid_syntax(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{not json", encoding="utf-8")
        with pytest.raises(MalformedRuleError, match="invalid JSON"):
            load_rule_table(path)

    def test_load_json_wrong_shape(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"rules": []}), encoding="utf-8")
        with pytest.raises(MalformedRuleError, match="expected a list"):
            load_rules_json(path)

    def test_write_json(self, tmp_path):
        table = load_rule_table().filter(carrier="USPS")
        path = tmp_path / "usps.json"
        write_rules_json(table, path)
        assert load_rules_json(path).rules == table.rules
        assert rule_table_to_records(table)[0]["carrier"] == "USPS"


class TestLoadRuleTable:
    """Tests for suffix dispatch."""

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("services: []\n", encoding="utf-8")
        with pytest.raises(MalformedRuleError, match="Unsupported rule file type"):
            load_rule_table(path)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
