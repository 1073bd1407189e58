"""
Constraint Evaluator

Tests one ConstraintSet against one Package. Every populated field is an
independent necessary condition; unpopulated fields impose nothing.

CHECKS
------
    weight_min              - weight_g >= weight_min_g
    weight_max              - weight_g <= weight_max_g
    max_single_dimension    - longest <= max_single_dimension_mm
    combined_dimensions     - formula(method) <= combined_dimensions.max_mm
    max_girth               - girth <= max_girth_mm
    max_length_plus_girth   - longest + girth <= max_length_plus_girth_mm
    box_max                 - sorted package within sorted box_max_mm
    box_min                 - sorted package covers sorted box_min_mm

All bounds are inclusive. validation_type never selects checks.
"""

from typing import Callable, Iterator

import polars as pl

from .model import ConstraintSet, Package
from .dimensions import (
    combined_column,
    combined_value,
    girth,
    length_plus_girth,
    longest,
    GIRTH_COL,
    LENGTH_PLUS_GIRTH_COL,
    LONGEST_COL,
)
from .box_fit import fits, fits_expr


Check = tuple[str, Callable[[], bool]]


def _checks(pkg: Package, c: ConstraintSet) -> Iterator[Check]:
    """Yield (name, predicate) for each populated field, cheapest first."""
    if c.weight_min_g is not None:
        yield "weight_min", lambda: c.weight_min_g <= pkg.weight_g
    if c.weight_max_g is not None:
        yield "weight_max", lambda: pkg.weight_g <= c.weight_max_g
    if c.max_single_dimension_mm is not None:
        yield "max_single_dimension", lambda: longest(pkg) <= c.max_single_dimension_mm
    if c.combined_dimensions is not None:
        combined = c.combined_dimensions
        yield "combined_dimensions", lambda: combined_value(pkg, combined.method) <= combined.max_mm
    if c.max_girth_mm is not None:
        yield "max_girth", lambda: girth(pkg) <= c.max_girth_mm
    if c.max_length_plus_girth_mm is not None:
        yield "max_length_plus_girth", lambda: length_plus_girth(pkg) <= c.max_length_plus_girth_mm
    if c.box_max_mm is not None:
        yield "box_max", lambda: fits(pkg, c.box_max_mm)
    if c.box_min_mm is not None:
        yield "box_min", lambda: fits(pkg, None, c.box_min_mm)


def evaluate(pkg: Package, c: ConstraintSet) -> bool:
    """
    True if the package satisfies every populated field of c.

    Stops at the first failing check. An empty ConstraintSet returns True.
    """
    return all(predicate() for _, predicate in _checks(pkg, c))


def failed_checks(pkg: Package, c: ConstraintSet) -> list[str]:
    """
    Names of every failing check, without short-circuiting.

    Empty list means evaluate() would return True.
    """
    return [name for name, predicate in _checks(pkg, c) if not predicate()]


# =============================================================================
# POLARS EXPRESSION
# =============================================================================

def conditions(c: ConstraintSet, weight: str = "weight_g") -> pl.Expr:
    """
    Polars expression equivalent to evaluate().

    Expects the columns added by supplement_packages().
    """
    # True for every validated package; keeps the result one value per row
    expr = pl.col(weight).is_not_null()

    if c.weight_min_g is not None:
        expr = expr & (pl.col(weight) >= c.weight_min_g)
    if c.weight_max_g is not None:
        expr = expr & (pl.col(weight) <= c.weight_max_g)
    if c.max_single_dimension_mm is not None:
        expr = expr & (pl.col(LONGEST_COL) <= c.max_single_dimension_mm)
    if c.combined_dimensions is not None:
        expr = expr & (
            combined_column(c.combined_dimensions.method) <= c.combined_dimensions.max_mm
        )
    if c.max_girth_mm is not None:
        expr = expr & (pl.col(GIRTH_COL) <= c.max_girth_mm)
    if c.max_length_plus_girth_mm is not None:
        expr = expr & (pl.col(LENGTH_PLUS_GIRTH_COL) <= c.max_length_plus_girth_mm)
    if c.box_max_mm is not None or c.box_min_mm is not None:
        expr = expr & fits_expr(c.box_max_mm, c.box_min_mm)

    return expr


__all__ = ["evaluate", "failed_checks", "conditions"]
