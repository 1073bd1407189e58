"""
Batch Eligibility Check
=======================

Checks a CSV of packages against a rule table and writes the result.

Input CSV needs columns: weight_g, length_mm, width_mm, height_mm.
Any other columns (order numbers, SKUs, ...) are passed through.

Modes:
    (default)   One row per package with eligible_<service_id> flags
    --long      One row per (package, eligible service)

Usage:
    python -m eligibility.scripts.check_eligibility --input packages.csv
    python -m eligibility.scripts.check_eligibility --input packages.csv --long
    python -m eligibility.scripts.check_eligibility --input packages.csv --rules rules.json --output out.csv
"""

import argparse
from datetime import datetime
from pathlib import Path

import polars as pl

from eligibility.check_packages import check_packages, to_long
from eligibility.data import load_rule_table


# =============================================================================
# CONFIGURATION
# =============================================================================

OUTPUT_DIR = Path(__file__).parent / "output"


# =============================================================================
# PIPELINE
# =============================================================================

def run(input_path: Path, rules_path: str | None, long: bool) -> pl.DataFrame:
    """Load packages and rules, run the check, return the output frame."""
    print("\nLoading rule table...")
    table = load_rule_table(rules_path)
    print(f"  {len(table):,} rules, {len(table.service_ids):,} services, {len(table.carriers)} carriers")

    print("Loading packages...")
    df = pl.read_csv(input_path)
    print(f"  Loaded {len(df):,} packages")

    print("Checking eligibility...")
    result = check_packages(df, table)

    if long:
        return to_long(result, table)

    # List column cannot be written to CSV
    return result.with_columns(pl.col("eligible_services").list.join(";"))


def print_summary(df: pl.DataFrame, long: bool) -> None:
    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)
    if long:
        print(f"Package/service pairs: {len(df):,}")
        if len(df):
            by_carrier = df.group_by("carrier").len().sort("len", descending=True)
            for row in by_carrier.iter_rows(named=True):
                print(f"  {row['carrier']:<12} {row['len']:>8,}")
    else:
        no_service = df.filter(pl.col("eligible_count") == 0)
        print(f"Packages checked:      {len(df):,}")
        print(f"With no service:       {len(no_service):,}")
        if len(df):
            print(f"Mean eligible count:   {df['eligible_count'].mean():.1f}")
    print("=" * 60)


# =============================================================================
# MAIN
# =============================================================================

def main():
    parser = argparse.ArgumentParser(
        description="Check package eligibility for carrier services",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m eligibility.scripts.check_eligibility --input packages.csv
  python -m eligibility.scripts.check_eligibility --input packages.csv --long
  python -m eligibility.scripts.check_eligibility --input packages.csv --rules rules.json
        """
    )

    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Package CSV (weight_g, length_mm, width_mm, height_mm)"
    )
    parser.add_argument(
        "--rules",
        type=str,
        default=None,
        help="Rule file, .csv or .json (default: bundled services.csv)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output CSV path (default: output/eligibility_YYYYMMDD_HHMMSS.csv)"
    )
    parser.add_argument(
        "--long",
        action="store_true",
        help="Write one row per (package, eligible service)"
    )

    args = parser.parse_args()

    print("=" * 60)
    print("SHIPPING SERVICE ELIGIBILITY CHECK")
    print("=" * 60)

    df = run(Path(args.input), args.rules, args.long)

    if args.output:
        output_path = Path(args.output)
    else:
        OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = OUTPUT_DIR / f"eligibility_{timestamp}.csv"

    df.write_csv(output_path)
    print(f"\nOutput saved to: {output_path.absolute()}")

    print_summary(df, args.long)


if __name__ == "__main__":
    main()
