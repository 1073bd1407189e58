"""
Batch Eligibility Checker

DataFrame in, DataFrame out. The input can come from any source (CSV,
database export, manual creation) as long as it contains the required
columns. The output is the same DataFrame with calculation columns and
eligibility flags appended.

REQUIRED INPUT COLUMNS
----------------------
    weight_g            - Actual weight in grams
    length_mm           - Package dimension in millimetres
    width_mm            - Package dimension in millimetres
    height_mm           - Package dimension in millimetres

OUTPUT COLUMNS ADDED
--------------------
    supplement_packages() adds:
        - longest_mm, middle_mm, shortest_mm
        - girth_mm, length_plus_girth_mm, standard_sum_mm

    calculate() adds:
        - eligible_<service_id> flags (one per service, OR over its rules)
        - eligible_services (ordered list of service ids), eligible_count
        - calculator_version

USAGE
-----
    from eligibility.check_packages import check_packages
    result = check_packages(df)
"""

import polars as pl

from .version import VERSION
from .errors import InvalidPackageError, MalformedRuleError
from .model import RuleTable
from .dimensions import dimension_columns
from .evaluate import conditions


PACKAGE_COLUMNS = ["weight_g", "length_mm", "width_mm", "height_mm"]
FLAG_PREFIX = "eligible_"
SUMMARY_COLUMNS = ["eligible_services", "eligible_count"]


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def check_packages(
    df: pl.DataFrame,
    table: RuleTable | None = None
) -> pl.DataFrame:
    """
    Check every package in a DataFrame against a rule table.

    Args:
        df: Package DataFrame with required columns (see module docstring)
        table: Rule table (bundled reference table if not provided)

    Returns:
        DataFrame with supplemented dimensions and eligibility columns
    """
    if table is None:
        from .data import load_rule_table
        table = load_rule_table()

    df = supplement_packages(df)
    df = calculate(df, table)
    return df


# =============================================================================
# SUPPLEMENT PACKAGES
# =============================================================================

def supplement_packages(df: pl.DataFrame) -> pl.DataFrame:
    """
    Validate package columns and add derived dimensions.

    Raises:
        InvalidPackageError: columns missing or non-numeric, or any row has
            a null, NaN, infinite or negative weight/dimension
    """
    df = _validate_packages(df)
    return df.with_columns(dimension_columns())


def _validate_packages(df: pl.DataFrame) -> pl.DataFrame:
    missing = [c for c in PACKAGE_COLUMNS if c not in df.columns]
    if missing:
        raise InvalidPackageError(f"Missing package column(s): {', '.join(missing)}")

    non_numeric = [c for c in PACKAGE_COLUMNS if not df.schema[c].is_numeric()]
    if non_numeric:
        raise InvalidPackageError(
            f"Package column(s) must be numeric: {', '.join(non_numeric)}"
        )

    df = df.with_columns([pl.col(c).cast(pl.Float64) for c in PACKAGE_COLUMNS])

    invalid = pl.any_horizontal([
        pl.col(c).is_null()
        | ~pl.col(c).is_finite().fill_null(False)
        | (pl.col(c) < 0).fill_null(False)
        for c in PACKAGE_COLUMNS
    ])
    invalid_count = df.select(invalid.sum()).item()

    if invalid_count:
        raise InvalidPackageError(
            f"{invalid_count} package(s) have a missing, non-finite or negative "
            f"weight or dimension. Check {', '.join(PACKAGE_COLUMNS)}."
        )

    return df


# =============================================================================
# CALCULATE
# =============================================================================

def calculate(df: pl.DataFrame, table: RuleTable) -> pl.DataFrame:
    """
    Add eligibility flags to supplemented packages.

    Each service gets one flag: the OR of its rules' conditions. Rules with
    the same service_id are alternatives, never separate columns.

    Raises:
        MalformedRuleError: a service_id whose flag column would collide
            with eligible_services or eligible_count
    """
    services = table.services()

    clashing = [s.service_id for s in services if flag_column(s.service_id) in SUMMARY_COLUMNS]
    if clashing:
        raise MalformedRuleError(
            f"service_id(s) clash with summary columns: {', '.join(clashing)}"
        )

    df = df.with_columns([
        pl.any_horizontal([conditions(rule.constraints) for rule in service.rules])
        .alias(flag_column(service.service_id))
        for service in services
    ])

    df = _add_eligible_services(df, [s.service_id for s in services])
    df = _stamp_version(df)
    return df


def flag_column(service_id: str) -> str:
    return f"{FLAG_PREFIX}{service_id}"


def _add_eligible_services(df: pl.DataFrame, service_ids: list[str]) -> pl.DataFrame:
    """Collect flagged service ids into a list column, in table order."""
    if not service_ids:
        df = df.with_columns(
            pl.Series("eligible_services", [[] for _ in range(df.height)], dtype=pl.List(pl.Utf8))
        )
    else:
        df = df.with_columns(
            pl.concat_list([
                pl.when(pl.col(flag_column(sid))).then(pl.lit(sid)).otherwise(None)
                for sid in service_ids
            ])
            .list.drop_nulls()
            .alias("eligible_services")
        )

    return df.with_columns(
        pl.col("eligible_services").list.len().alias("eligible_count")
    )


def _stamp_version(df: pl.DataFrame) -> pl.DataFrame:
    """Stamp calculator version on output."""
    return df.with_columns(pl.lit(VERSION).alias("calculator_version"))


# =============================================================================
# REPORTING
# =============================================================================

def to_long(df: pl.DataFrame, table: RuleTable) -> pl.DataFrame:
    """
    One row per (package, eligible service).

    Args:
        df: Output of calculate() / check_packages()
        table: Rule table used for the check (supplies names and carriers)

    Returns:
        DataFrame with package_index, package columns, service_id,
        service_name, carrier. Packages with no eligible service are omitted.
    """
    services = table.services()
    service_info = pl.DataFrame(
        {
            "service_id": [s.service_id for s in services],
            "service_name": [s.service_name for s in services],
            "carrier": [s.carrier for s in services],
            "_service_order": list(range(len(services))),
        },
        schema={
            "service_id": pl.Utf8,
            "service_name": pl.Utf8,
            "carrier": pl.Utf8,
            "_service_order": pl.Int64,
        },
    )

    return (
        df
        .with_row_index("package_index")
        .select(["package_index", *PACKAGE_COLUMNS, "eligible_services"])
        .explode("eligible_services")
        .rename({"eligible_services": "service_id"})
        .filter(pl.col("service_id").is_not_null())
        .join(service_info, on="service_id", how="left")
        .sort(["package_index", "_service_order"])
        .drop("_service_order")
    )


__all__ = [
    "check_packages",
    "supplement_packages",
    "calculate",
    "flag_column",
    "to_long",
    "PACKAGE_COLUMNS",
]
