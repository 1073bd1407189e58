"""
CSV Rule Loader

Reads and writes rule tables in the flat reference layout
(see data/reference/services.py).
"""

from pathlib import Path

import polars as pl

from ...errors import MalformedRuleError
from ...model import ConstraintSet, RuleTable, ServiceRule
from ..reference import BOX_SEPARATOR, CSV_COLUMNS, NUMERIC_COLUMNS


SCHEMA = {
    col: (pl.Float64 if col in NUMERIC_COLUMNS else pl.Utf8)
    for col in CSV_COLUMNS
}


def load_rules_csv(path: str | Path) -> RuleTable:
    """
    Load a rule table from CSV.

    Args:
        path: CSV file in the reference layout

    Returns:
        RuleTable in file order

    Raises:
        MalformedRuleError: a cell cannot be parsed or any row is invalid
            (all bad rows are reported)
    """
    try:
        df = pl.read_csv(path, schema_overrides=SCHEMA)
    except pl.exceptions.ComputeError as e:
        raise MalformedRuleError(f"{path}: {e}") from None
    return rules_from_frame(df)


def rules_from_frame(df: pl.DataFrame) -> RuleTable:
    """Build a RuleTable from a DataFrame in the reference layout."""
    missing = [c for c in ("service_id", "service_name", "carrier", "validation_type") if c not in df.columns]
    if missing:
        raise MalformedRuleError(f"Rule table is missing column(s): {', '.join(missing)}")

    unknown = [c for c in df.columns if c not in CSV_COLUMNS]
    if unknown:
        raise MalformedRuleError(f"Rule table has unknown column(s): {', '.join(unknown)}")

    rules = []
    errors = []

    # Row numbers are 1-based data rows (header excluded)
    for i, row in enumerate(df.iter_rows(named=True), start=1):
        try:
            rules.append(_row_to_rule(row))
        except MalformedRuleError as e:
            errors.append(f"row {i}: {e}")

    if errors:
        raise MalformedRuleError("Rule table errors:\n  " + "\n  ".join(errors))

    return RuleTable(rules)


def _row_to_rule(row: dict) -> ServiceRule:
    combined = None
    if row.get("combined_max_mm") is not None or row.get("combined_method") is not None:
        combined = {}
        if row.get("combined_max_mm") is not None:
            combined["max_mm"] = row["combined_max_mm"]
        if row.get("combined_method") is not None:
            combined["method"] = row["combined_method"].strip()

    try:
        constraints = ConstraintSet(
            weight_min_g=row.get("weight_min_g"),
            weight_max_g=row.get("weight_max_g"),
            max_single_dimension_mm=row.get("max_single_dimension_mm"),
            combined_dimensions=combined,
            max_girth_mm=row.get("max_girth_mm"),
            max_length_plus_girth_mm=row.get("max_length_plus_girth_mm"),
            box_max_mm=parse_box(row.get("box_max_mm")),
            box_min_mm=parse_box(row.get("box_min_mm")),
        )
    except MalformedRuleError as e:
        raise MalformedRuleError(f"{row.get('service_id')!r}: {e}") from None

    return ServiceRule(
        service_id=row["service_id"],
        service_name=row["service_name"] or "",
        carrier=row["carrier"] or "",
        validation_type=row["validation_type"],
        constraints=constraints,
    )


def parse_box(value: str | None) -> list[float] | None:
    """Parse "350x230x30" into [350.0, 230.0, 30.0]."""
    if value is None or not value.strip():
        return None
    parts = value.strip().lower().split(BOX_SEPARATOR)
    try:
        return [float(p) for p in parts]
    except ValueError:
        raise MalformedRuleError(f"Box envelope {value!r} is not LxWxH") from None


def format_box(dims) -> str | None:
    if dims is None:
        return None
    return BOX_SEPARATOR.join(_format_number(d) for d in dims)


def _float(value) -> float | None:
    return None if value is None else float(value)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def rules_to_frame(table: RuleTable) -> pl.DataFrame:
    """One row per rule, columns in CSV_COLUMNS order."""
    rows = []
    for rule in table:
        c = rule.constraints
        rows.append({
            "service_id": rule.service_id,
            "service_name": rule.service_name,
            "carrier": rule.carrier,
            "validation_type": rule.validation_type,
            "weight_min_g": _float(c.weight_min_g),
            "weight_max_g": _float(c.weight_max_g),
            "max_single_dimension_mm": _float(c.max_single_dimension_mm),
            "combined_max_mm": _float(c.combined_dimensions.max_mm) if c.combined_dimensions else None,
            "combined_method": c.combined_dimensions.method if c.combined_dimensions else None,
            "max_girth_mm": _float(c.max_girth_mm),
            "max_length_plus_girth_mm": _float(c.max_length_plus_girth_mm),
            "box_max_mm": format_box(c.box_max_mm),
            "box_min_mm": format_box(c.box_min_mm),
        })
    return pl.DataFrame(rows, schema=SCHEMA)


def write_rules_csv(table: RuleTable, path: str | Path) -> None:
    rules_to_frame(table).write_csv(path)


__all__ = [
    "load_rules_csv",
    "rules_from_frame",
    "rules_to_frame",
    "write_rules_csv",
    "parse_box",
    "format_box",
]
