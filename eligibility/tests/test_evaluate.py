"""
Tests for Constraint Evaluator and Combined-Dimension Strategy

Run with: pytest eligibility/tests/ -v
"""

from itertools import permutations

import pytest

from eligibility.dimensions import (
    COMBINED_METHODS,
    circumference,
    combined_value,
    girth,
    length_plus_girth,
    standard_sum,
)
from eligibility.evaluate import evaluate, failed_checks
from eligibility.model import ConstraintSet, Package


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def base_package() -> Package:
    """400 x 300 x 100 mm, 2 kg."""
    return Package(weight_g=2000, length_mm=400, width_mm=300, height_mm=100)


def rotations(pkg: Package) -> list[Package]:
    return [
        Package(weight_g=pkg.weight_g, length_mm=l, width_mm=w, height_mm=h)
        for l, w, h in permutations(pkg.dimensions)
    ]


# =============================================================================
# COMBINED-DIMENSION STRATEGY TESTS
# =============================================================================

class TestCombinedDimensions:
    """Tests for the combined-dimension formulas."""

    def test_girth(self, base_package):
        """Girth = 2 * (two smaller dimensions) = 2 * (300 + 100)."""
        assert girth(base_package) == 800

    def test_length_plus_girth(self, base_package):
        """Longest + 2 * (other two) = 400 + 800."""
        assert length_plus_girth(base_package) == 1200

    def test_circumference_equals_girth(self, base_package):
        assert circumference(base_package) == girth(base_package)

    def test_standard_sum(self, base_package):
        """length + 2*width + 2*height = 400 + 600 + 200."""
        assert standard_sum(base_package) == 1200

    def test_standard_sum_uses_given_order(self):
        """standard_sum is not sorted: the first dimension counts once."""
        assert standard_sum(Package(0, 100, 10, 10)) == 140
        assert standard_sum(Package(0, 10, 100, 10)) == 230

    def test_combined_value_dispatch(self):
        pkg = Package(0, 10, 100, 10)
        assert combined_value(pkg, "standard_sum") == 230
        assert combined_value(pkg, "length_plus_girth") == 140
        assert combined_value(pkg, "circumference") == 40

    def test_custom_has_no_formula(self):
        assert "custom" not in COMBINED_METHODS
        with pytest.raises(KeyError):
            combined_value(Package(0, 1, 1, 1), "custom")

    @pytest.mark.parametrize("measure", [girth, length_plus_girth, circumference])
    def test_rotation_invariant_measures(self, base_package, measure):
        values = {measure(p) for p in rotations(base_package)}
        assert values == {measure(base_package)}


# =============================================================================
# SINGLE CHECK TESTS
# =============================================================================

class TestWeightChecks:
    """Tests for weight bounds."""

    def test_at_max_accepted(self, base_package):
        assert evaluate(base_package, ConstraintSet(weight_max_g=2000))

    def test_one_over_max_rejected(self, base_package):
        assert not evaluate(base_package, ConstraintSet(weight_max_g=1999))

    def test_at_min_accepted(self, base_package):
        assert evaluate(base_package, ConstraintSet(weight_min_g=2000))

    def test_below_min_rejected(self, base_package):
        assert not evaluate(base_package, ConstraintSet(weight_min_g=2001))

    def test_monotonic_past_max(self):
        """Once heavier than weight_max_g, heavier never passes again."""
        c = ConstraintSet(weight_max_g=1000)
        results = [evaluate(Package(w, 10, 10, 10), c) for w in range(0, 3000, 50)]
        first_fail = results.index(False)
        assert all(results[:first_fail])
        assert not any(results[first_fail:])


class TestDimensionChecks:
    """Tests for single, combined, girth and length+girth caps."""

    def test_max_single_at_boundary(self, base_package):
        assert evaluate(base_package, ConstraintSet(max_single_dimension_mm=400))

    def test_max_single_one_over(self, base_package):
        assert not evaluate(base_package, ConstraintSet(max_single_dimension_mm=399))

    def test_max_single_uses_largest_in_any_position(self):
        pkg = Package(weight_g=1, length_mm=100, width_mm=100, height_mm=500)
        assert not evaluate(pkg, ConstraintSet(max_single_dimension_mm=400))

    def test_combined_standard_sum(self, base_package):
        c = ConstraintSet(combined_dimensions={"max_mm": 1200, "method": "standard_sum"})
        assert evaluate(base_package, c)
        c = ConstraintSet(combined_dimensions={"max_mm": 1199, "method": "standard_sum"})
        assert not evaluate(base_package, c)

    def test_combined_method_is_honoured(self):
        """Same cap, different method, different outcome."""
        pkg = Package(weight_g=1, length_mm=10, width_mm=100, height_mm=10)
        cap = 150
        assert not evaluate(pkg, ConstraintSet(combined_dimensions={"max_mm": cap, "method": "standard_sum"}))
        assert evaluate(pkg, ConstraintSet(combined_dimensions={"max_mm": cap, "method": "length_plus_girth"}))
        assert evaluate(pkg, ConstraintSet(combined_dimensions={"max_mm": cap, "method": "circumference"}))

    def test_max_girth(self, base_package):
        assert evaluate(base_package, ConstraintSet(max_girth_mm=800))
        assert not evaluate(base_package, ConstraintSet(max_girth_mm=799))

    def test_max_length_plus_girth(self, base_package):
        assert evaluate(base_package, ConstraintSet(max_length_plus_girth_mm=1200))
        assert not evaluate(base_package, ConstraintSet(max_length_plus_girth_mm=1199))

    def test_box_max(self, base_package):
        assert evaluate(base_package, ConstraintSet(box_max_mm=[100, 400, 300]))
        assert not evaluate(base_package, ConstraintSet(box_max_mm=[100, 400, 299]))

    def test_box_min(self, base_package):
        assert evaluate(base_package, ConstraintSet(box_min_mm=[400, 300, 100]))
        assert not evaluate(base_package, ConstraintSet(box_min_mm=[401, 300, 100]))


# =============================================================================
# COMBINATION TESTS
# =============================================================================

class TestEvaluate:
    """Tests for AND semantics across populated fields."""

    def test_vacuous_constraint_accepts_everything(self):
        c = ConstraintSet()
        for pkg in [
            Package(0, 0, 0, 0),
            Package(1_000_000, 10_000, 10_000, 10_000),
            Package(5000, 1300, 200, 100),
        ]:
            assert evaluate(pkg, c)

    def test_all_pass(self, base_package):
        c = ConstraintSet(
            weight_min_g=1000,
            weight_max_g=3000,
            max_single_dimension_mm=500,
            combined_dimensions={"max_mm": 1500, "method": "length_plus_girth"},
            max_girth_mm=1000,
            max_length_plus_girth_mm=1500,
            box_max_mm=[500, 400, 200],
        )
        assert evaluate(base_package, c)

    def test_single_failure_fails_set(self, base_package):
        c = ConstraintSet(
            weight_max_g=3000,
            max_single_dimension_mm=500,
            max_girth_mm=799,
        )
        assert not evaluate(base_package, c)

    def test_failed_checks_lists_every_failure(self, base_package):
        c = ConstraintSet(
            weight_max_g=1000,
            max_single_dimension_mm=500,
            max_girth_mm=700,
            box_max_mm=[350, 300, 100],
        )
        assert failed_checks(base_package, c) == ["weight_max", "max_girth", "box_max"]

    def test_failed_checks_empty_when_passing(self, base_package):
        assert failed_checks(base_package, ConstraintSet(weight_max_g=5000)) == []

    def test_failed_checks_agrees_with_evaluate(self, base_package):
        for c in [
            ConstraintSet(),
            ConstraintSet(weight_min_g=2500),
            ConstraintSet(box_min_mm=[10, 10, 10], box_max_mm=[400, 300, 100]),
            ConstraintSet(combined_dimensions={"max_mm": 1000, "method": "standard_sum"}),
        ]:
            assert evaluate(base_package, c) == (failed_checks(base_package, c) == [])

    @pytest.mark.parametrize("c", [
        ConstraintSet(max_girth_mm=800),
        ConstraintSet(max_length_plus_girth_mm=1199),
        ConstraintSet(box_max_mm=[400, 300, 100]),
        ConstraintSet(box_min_mm=[350, 250, 100]),
        ConstraintSet(combined_dimensions={"max_mm": 1200, "method": "length_plus_girth"}),
        ConstraintSet(combined_dimensions={"max_mm": 799, "method": "circumference"}),
        ConstraintSet(max_single_dimension_mm=399),
    ])
    def test_rotation_invariant(self, base_package, c):
        results = {evaluate(p, c) for p in rotations(base_package)}
        assert len(results) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
