"""
Shipping Eligibility Calculator
===============================

Interactive CLI tool to list the carrier services a single package can use.

Usage:
    python -m eligibility.scripts.calculator
    python -m eligibility.scripts.calculator --rules my_rules.json
"""

import argparse

from eligibility.aggregate import eligible_services
from eligibility.data import load_rule_table
from eligibility.dimensions import girth, length_plus_girth, standard_sum
from eligibility.evaluate import failed_checks
from eligibility.model import Package, RuleTable
from eligibility.version import VERSION


def get_user_input() -> Package:
    """Prompt user for package details."""
    print("\n=== Shipping Service Eligibility Calculator ===")
    print(f"Version: {VERSION}\n")

    length = float(input("Length (mm): "))
    width = float(input("Width (mm): "))
    height = float(input("Height (mm): "))
    weight = float(input("Weight (g): "))

    return Package(weight_g=weight, length_mm=length, width_mm=width, height_mm=height)


def print_results(pkg: Package, table: RuleTable, show_rejected: bool = False) -> None:
    """Print eligible services grouped by carrier."""
    result = eligible_services(pkg, table)

    print("\n" + "=" * 50)
    print("ELIGIBILITY RESULTS")
    print("=" * 50)

    print(f"\nPackage: {pkg.length_mm:g}x{pkg.width_mm:g}x{pkg.height_mm:g} mm, {pkg.weight_g:g} g")
    print(f"Girth: {girth(pkg):g} mm")
    print(f"Length + girth: {length_plus_girth(pkg):g} mm")
    print(f"Standard sum: {standard_sum(pkg):g} mm")

    print(f"\nEligible services: {len(result)} of {len(table.service_ids)}")

    for carrier in table.carriers:
        matches = [m for m in result if m.carrier == carrier]
        if not matches:
            continue
        print(f"\n--- {carrier} ---")
        for m in matches:
            print(f"  {m.service_name:<45} [{', '.join(m.validation_types)}]")

    if show_rejected:
        print("\n--- Rejected ---")
        for service in table.services():
            if service.service_id in result:
                continue
            reasons = sorted({
                name
                for rule in service.rules
                for name in failed_checks(pkg, rule.constraints)
            })
            print(f"  {service.service_name:<45} {', '.join(reasons)}")

    print()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="List carrier services a package is eligible for",
    )
    parser.add_argument(
        "--rules",
        type=str,
        default=None,
        help="Rule file (.csv or .json, default: bundled services.csv)"
    )
    parser.add_argument(
        "--show-rejected",
        action="store_true",
        help="Also list rejected services with the checks they failed"
    )
    args = parser.parse_args()

    try:
        table = load_rule_table(args.rules)
        pkg = get_user_input()
        print_results(pkg, table, show_rejected=args.show_rejected)

    except KeyboardInterrupt:
        print("\n\nCancelled.")
    except Exception as e:
        print(f"\nError: {e}")
        raise


if __name__ == "__main__":
    main()
