"""
Box-Fit Matcher

Rotation-invariant envelope check. Package and envelope dimensions are sorted
largest first and compared slot by slot.

This is a conservative approximation of 3D packing: it only considers
axis-aligned orientations where the longest package side meets the longest
envelope side, and so on. Some tilted placements that would physically fit
are rejected.
"""

from typing import Sequence

import polars as pl

from .model import Package, sort_descending
from .dimensions import LONGEST_COL, MIDDLE_COL, SHORTEST_COL


SORTED_COLUMNS = (LONGEST_COL, MIDDLE_COL, SHORTEST_COL)


def fits(
    pkg: Package,
    box_max: Sequence[float] | None,
    box_min: Sequence[float] | None = None,
) -> bool:
    """
    Check a package against a maximum and/or minimum envelope.

    Args:
        pkg: Package to place
        box_max: Envelope the package must fit inside (None = no cap)
        box_min: Envelope the package must cover (None = no floor)

    Returns:
        True if every sorted package side is within the sorted bounds
        (both inclusive)
    """
    dims = pkg.sorted_dimensions

    if box_max is not None:
        if any(d > b for d, b in zip(dims, sort_descending(box_max))):
            return False

    if box_min is not None:
        if any(d < b for d, b in zip(dims, sort_descending(box_min))):
            return False

    return True


def fits_expr(
    box_max: Sequence[float] | None,
    box_min: Sequence[float] | None = None,
) -> pl.Expr:
    """Same check as fits() over the sorted dimension columns."""
    expr = pl.lit(True)

    if box_max is not None:
        for col, b in zip(SORTED_COLUMNS, sort_descending(box_max)):
            expr = expr & (pl.col(col) <= b)

    if box_min is not None:
        for col, b in zip(SORTED_COLUMNS, sort_descending(box_min)):
            expr = expr & (pl.col(col) >= b)

    return expr


__all__ = ["fits", "fits_expr"]
