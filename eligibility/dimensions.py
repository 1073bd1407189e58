"""
Combined-Dimension Strategy

Scalar size measures for a single Package, plus the same measures as polars
expressions for the batch pipeline. Both sides must agree exactly.

FORMULAS
--------
    girth              - 2 * (second longest + shortest)
    length_plus_girth  - longest + girth
    standard_sum       - length + 2 * width + 2 * height, dimensions in the
                         order given (NOT sorted)
    circumference      - same value as girth, kept as its own method because
                         carrier data labels it separately
"""

from typing import Callable

import polars as pl

from .model import Package


# =============================================================================
# SCALAR MEASURES
# =============================================================================

def longest(pkg: Package) -> float:
    return pkg.sorted_dimensions[0]


def girth(pkg: Package) -> float:
    """Twice the sum of the two smaller dimensions."""
    _, middle, shortest = pkg.sorted_dimensions
    return 2 * (middle + shortest)


def length_plus_girth(pkg: Package) -> float:
    return longest(pkg) + girth(pkg)


def standard_sum(pkg: Package) -> float:
    """Carrier-declared linear + girth total, order dependent."""
    return pkg.length_mm + 2 * pkg.width_mm + 2 * pkg.height_mm


def circumference(pkg: Package) -> float:
    return girth(pkg)


COMBINED_METHODS: dict[str, Callable[[Package], float]] = {
    "standard_sum": standard_sum,
    "length_plus_girth": length_plus_girth,
    "circumference": circumference,
}


def combined_value(pkg: Package, method: str) -> float:
    """
    Compute the combined-dimension scalar for a method.

    Raises:
        KeyError: method has no formula (rules declaring one are rejected
            at load time, so this only fires on direct misuse)
    """
    return COMBINED_METHODS[method](pkg)


# =============================================================================
# POLARS EXPRESSIONS
# =============================================================================

# Column names added by the batch pipeline
LONGEST_COL = "longest_mm"
MIDDLE_COL = "middle_mm"
SHORTEST_COL = "shortest_mm"
GIRTH_COL = "girth_mm"
LENGTH_PLUS_GIRTH_COL = "length_plus_girth_mm"
STANDARD_SUM_COL = "standard_sum_mm"

COMBINED_COLUMNS: dict[str, str] = {
    "standard_sum": STANDARD_SUM_COL,
    "length_plus_girth": LENGTH_PLUS_GIRTH_COL,
    "circumference": GIRTH_COL,
}


def dimension_columns(
    length: str = "length_mm",
    width: str = "width_mm",
    height: str = "height_mm",
) -> list[pl.Expr]:
    """
    Expressions adding sorted dimensions and combined measures.

    Sorted columns come from a per-row list sort, so longest/middle/shortest
    are rotation invariant. standard_sum uses the input columns as given.
    """
    dims = pl.concat_list([length, width, height]).list.sort(descending=True)

    return [
        dims.list.get(0).alias(LONGEST_COL),
        dims.list.get(1).alias(MIDDLE_COL),
        dims.list.get(2).alias(SHORTEST_COL),
        (2 * (dims.list.get(1) + dims.list.get(2))).alias(GIRTH_COL),
        (
            dims.list.get(0) + 2 * (dims.list.get(1) + dims.list.get(2))
        ).alias(LENGTH_PLUS_GIRTH_COL),
        (
            pl.col(length) + 2 * pl.col(width) + 2 * pl.col(height)
        ).alias(STANDARD_SUM_COL),
    ]


def combined_column(method: str) -> pl.Expr:
    """Column holding the combined-dimension value for a method."""
    return pl.col(COMBINED_COLUMNS[method])


__all__ = [
    "longest",
    "girth",
    "length_plus_girth",
    "standard_sum",
    "circumference",
    "COMBINED_METHODS",
    "combined_value",
    "LONGEST_COL",
    "MIDDLE_COL",
    "SHORTEST_COL",
    "GIRTH_COL",
    "LENGTH_PLUS_GIRTH_COL",
    "STANDARD_SUM_COL",
    "COMBINED_COLUMNS",
    "dimension_columns",
    "combined_column",
]
