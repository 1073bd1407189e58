"""
Record Rule Loader

Builds rule tables from deserialized config (lists of dicts, JSON files).

SCHEMAS
-------
Current schema (what rule_table_to_records writes):

    {
        "service_id": "evri_48_parcels",
        "service_name": "EVRI 48 Parcels",
        "carrier": "EVRI",
        "validation_type": "dimension_limits",
        "constraints": {
            "weight_max_g": 15000,
            "max_single_dimension_mm": 1200,
            "combined_dimensions": {"max_mm": 2250, "method": "standard_sum"}
        }
    }

Legacy constraint keys are translated:

    max_combined_dimensions_mm   -> combined_dimensions.max_mm
    combined_calculation_method  -> combined_dimensions.method
    box_dimensions_mm            -> box_max_mm
    box_dimensions_min_mm        -> box_min_mm

ALTERNATIVES
------------
A record may carry "alternative_constraints": a list of extra constraint
mappings. Each becomes its own ServiceRule with the same service_id, so
alternatives end up in exactly the same shape as repeated records. An
alternative may override validation_type.
"""

import json
from pathlib import Path
from typing import Iterable

from ...errors import MalformedRuleError
from ...model import ConstraintSet, RuleTable, ServiceRule


LEGACY_KEYS = {
    "box_dimensions_mm": "box_max_mm",
    "box_dimensions_min_mm": "box_min_mm",
}

LEGACY_COMBINED_MAX = "max_combined_dimensions_mm"
LEGACY_COMBINED_METHOD = "combined_calculation_method"

RECORD_FIELDS = (
    "service_id",
    "service_name",
    "carrier",
    "validation_type",
    "constraints",
    "alternative_constraints",
)


def rules_from_records(records: Iterable[dict]) -> RuleTable:
    """
    Build a RuleTable from service records.

    Raises:
        MalformedRuleError: any record is invalid (all bad records are
            reported together; none are skipped)
    """
    rules = []
    errors = []

    for i, record in enumerate(records):
        try:
            rules.extend(record_to_rules(record))
        except MalformedRuleError as e:
            errors.append(f"record {i}: {e}")

    if errors:
        raise MalformedRuleError("Rule table errors:\n  " + "\n  ".join(errors))

    return RuleTable(rules)


def record_to_rules(record: dict) -> list[ServiceRule]:
    """Expand one record into its primary rule plus any alternatives."""
    if not isinstance(record, dict):
        raise MalformedRuleError(f"expected a mapping, got {record!r}")

    service_id = record.get("service_id")
    unknown = sorted(set(record) - set(RECORD_FIELDS))
    if unknown:
        raise MalformedRuleError(
            f"Malformed rule {service_id!r}: unknown field(s): {', '.join(unknown)}"
        )

    alternatives = record.get("alternative_constraints") or []
    if not isinstance(alternatives, list):
        raise MalformedRuleError(
            f"Malformed rule {service_id!r}: alternative_constraints must be a list"
        )

    base = {k: v for k, v in record.items() if k != "alternative_constraints"}
    rules = [ServiceRule.from_dict({**base, "constraints": normalize_constraints(base.get("constraints"))})]

    for alternative in alternatives:
        if not isinstance(alternative, dict):
            raise MalformedRuleError(
                f"Malformed rule {service_id!r}: alternative {alternative!r} is not a mapping"
            )
        alternative = dict(alternative)
        validation_type = alternative.pop("validation_type", base.get("validation_type"))
        rules.append(ServiceRule.from_dict({
            **base,
            "validation_type": validation_type,
            "constraints": normalize_constraints(alternative),
        }))

    return rules


def normalize_constraints(raw: dict | None) -> dict | None:
    """Translate legacy constraint keys to the current schema."""
    if not isinstance(raw, dict):
        return raw

    out = dict(raw)

    for legacy, current in LEGACY_KEYS.items():
        if legacy in out:
            if current in out:
                raise MalformedRuleError(
                    f"Malformed constraints: both {legacy} and {current} given"
                )
            out[current] = out.pop(legacy)

    if LEGACY_COMBINED_MAX in out or LEGACY_COMBINED_METHOD in out:
        if "combined_dimensions" in out:
            raise MalformedRuleError(
                "Malformed constraints: both legacy combined fields and combined_dimensions given"
            )
        combined = {}
        if LEGACY_COMBINED_MAX in out:
            combined["max_mm"] = out.pop(LEGACY_COMBINED_MAX)
        if LEGACY_COMBINED_METHOD in out:
            combined["method"] = out.pop(LEGACY_COMBINED_METHOD)
        out["combined_dimensions"] = combined

    return out


def load_rules_json(path: str | Path) -> RuleTable:
    """
    Load a rule table from a JSON file.

    Accepts a top-level list of records or {"services": [...]}.

    Raises:
        MalformedRuleError: file is not valid JSON or any record is invalid
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise MalformedRuleError(f"{path}: invalid JSON: {e}") from None
    if isinstance(data, dict):
        data = data.get("services")
    if not isinstance(data, list):
        raise MalformedRuleError(
            f"{path}: expected a list of service records or {{\"services\": [...]}}"
        )
    return rules_from_records(data)


def rule_table_to_records(table: RuleTable) -> list[dict]:
    """Serialize a table to current-schema records, one per rule."""
    return [rule.to_dict() for rule in table]


def write_rules_json(table: RuleTable, path: str | Path) -> None:
    Path(path).write_text(
        json.dumps({"services": rule_table_to_records(table)}, indent=2),
        encoding="utf-8",
    )


__all__ = [
    "rules_from_records",
    "record_to_rules",
    "normalize_constraints",
    "load_rules_json",
    "rule_table_to_records",
    "write_rules_json",
]
