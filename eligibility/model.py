"""
Rule Model
==========

Value types for packages, constraint sets and service rules.

All types are frozen dataclasses. Validation happens at construction, so a
ConstraintSet or ServiceRule that exists has already been checked and can be
handed to the evaluator without further guards.

UNITS
-----
    Weights are grams, lengths are millimetres.

OR SEMANTICS
------------
    A logical service may own several ServiceRule records with the same
    service_id. Each record is one alternative acceptance path; the service
    is eligible when any of them passes. RuleTable.services() groups the
    records into Service objects, which is the only place alternatives live.
"""

import math
import numbers
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Literal

import polars as pl

from .errors import InvalidPackageError, MalformedRuleError


# =============================================================================
# ENUMERATIONS
# =============================================================================

ValidationType = Literal["box_fit", "dimension_limits", "oversized"]
CombinedMethod = Literal["standard_sum", "length_plus_girth", "circumference", "custom"]

VALIDATION_TYPES: tuple[str, ...] = ("box_fit", "dimension_limits", "oversized")
COMBINED_METHOD_NAMES: tuple[str, ...] = (
    "standard_sum",
    "length_plus_girth",
    "circumference",
    "custom",
)

# Declared in carrier data but without a formula
UNSUPPORTED_METHODS: tuple[str, ...] = ("custom",)

Dimensions = tuple[float, float, float]


# =============================================================================
# HELPERS
# =============================================================================

def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_finite(value) -> bool:
    # Ints beyond float range cannot be compared against float limits
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _check_bound(name: str, value, errors: list[str]) -> None:
    """Append an error if value is not a finite, non-negative number."""
    if value is None:
        return
    if not _is_number(value):
        errors.append(f"{name} must be a number, got {value!r}")
    elif not _is_finite(value):
        shown = "an integer too large for a float" if isinstance(value, numbers.Integral) else repr(value)
        errors.append(f"{name} must be finite, got {shown}")
    elif value < 0:
        errors.append(f"{name} cannot be negative, got {value!r}")


def _as_dimensions(name: str, value, errors: list[str]) -> Dimensions | None:
    """Coerce a 3-entry sequence to a tuple, recording problems in errors."""
    if value is None:
        return None
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        errors.append(f"{name} must be a list of 3 dimensions, got {value!r}")
        return None
    dims = tuple(value)
    if len(dims) != 3:
        errors.append(f"{name} must have exactly 3 entries, got {len(dims)}")
        return None
    before = len(errors)
    for i, d in enumerate(dims):
        _check_bound(f"{name}[{i}]", d, errors)
    if len(errors) > before:
        return None
    return dims


def sort_descending(dims: Iterable[float]) -> Dimensions:
    """Sort three dimensions largest first."""
    return tuple(sorted(dims, reverse=True))


# =============================================================================
# PACKAGE
# =============================================================================

@dataclass(frozen=True)
class Package:
    """
    Physical package to check.

    The three dimensions are unordered for fit purposes: no axis is
    privileged as "length" except by the standard_sum formula, which uses
    them in the order given.
    """

    weight_g: float
    length_mm: float
    width_mm: float
    height_mm: float

    def __post_init__(self) -> None:
        errors: list[str] = []
        for name in ("weight_g", "length_mm", "width_mm", "height_mm"):
            value = getattr(self, name)
            if value is None:
                errors.append(f"{name} must be a number, got None")
            else:
                _check_bound(name, value, errors)
        if errors:
            raise InvalidPackageError("Invalid package:\n  " + "\n  ".join(errors))

    @property
    def dimensions(self) -> Dimensions:
        """Dimensions in the order given (length, width, height)."""
        return (self.length_mm, self.width_mm, self.height_mm)

    @property
    def sorted_dimensions(self) -> Dimensions:
        """Dimensions sorted largest first."""
        return sort_descending(self.dimensions)

    @classmethod
    def from_dict(cls, raw: dict) -> "Package":
        try:
            return cls(
                weight_g=raw["weight_g"],
                length_mm=raw["length_mm"],
                width_mm=raw["width_mm"],
                height_mm=raw["height_mm"],
            )
        except KeyError as e:
            raise InvalidPackageError(f"Invalid package: missing field {e.args[0]!r}") from None


# =============================================================================
# CONSTRAINT SET
# =============================================================================

@dataclass(frozen=True)
class CombinedDimensions:
    """Cap on a carrier-specific "total size" scalar."""

    max_mm: float
    method: CombinedMethod


# Keys accepted by ConstraintSet.from_dict
CONSTRAINT_FIELDS: tuple[str, ...] = (
    "weight_min_g",
    "weight_max_g",
    "max_single_dimension_mm",
    "combined_dimensions",
    "max_girth_mm",
    "max_length_plus_girth_mm",
    "box_max_mm",
    "box_min_mm",
)


@dataclass(frozen=True)
class ConstraintSet:
    """
    Atomic rule unit. Every field is optional; None means unconstrained.

    Attributes:
        WEIGHT (inclusive bounds)
            weight_min_g, weight_max_g

        DIMENSIONS
            max_single_dimension_mm  - cap on the largest dimension
            combined_dimensions      - cap on a formula-based total size
            max_girth_mm             - cap on 2 * (two smaller dimensions)
            max_length_plus_girth_mm - cap on largest dimension + girth

        BOX FIT (rotation invariant)
            box_max_mm - envelope the package must fit inside
            box_min_mm - envelope the package must cover

    A ConstraintSet with nothing populated accepts every package.
    """

    weight_min_g: float | None = None
    weight_max_g: float | None = None
    max_single_dimension_mm: float | None = None
    combined_dimensions: CombinedDimensions | None = None
    max_girth_mm: float | None = None
    max_length_plus_girth_mm: float | None = None
    box_max_mm: Dimensions | None = None
    box_min_mm: Dimensions | None = None

    def __post_init__(self) -> None:
        errors: list[str] = []

        for name in (
            "weight_min_g",
            "weight_max_g",
            "max_single_dimension_mm",
            "max_girth_mm",
            "max_length_plus_girth_mm",
        ):
            _check_bound(name, getattr(self, name), errors)

        if (
            _is_number(self.weight_min_g)
            and _is_number(self.weight_max_g)
            and self.weight_min_g > self.weight_max_g
        ):
            errors.append(
                f"weight_min_g ({self.weight_min_g}) exceeds weight_max_g ({self.weight_max_g})"
            )

        combined = self.combined_dimensions
        if combined is not None:
            if isinstance(combined, dict):
                combined = _combined_from_dict(combined, errors)
                object.__setattr__(self, "combined_dimensions", combined)
            elif not isinstance(combined, CombinedDimensions):
                errors.append(f"combined_dimensions must be a mapping, got {combined!r}")
            if isinstance(combined, CombinedDimensions):
                _check_combined(combined, errors)

        box_max = _as_dimensions("box_max_mm", self.box_max_mm, errors)
        box_min = _as_dimensions("box_min_mm", self.box_min_mm, errors)
        object.__setattr__(self, "box_max_mm", box_max)
        object.__setattr__(self, "box_min_mm", box_min)

        if box_max is not None and box_min is not None:
            for i, (lo, hi) in enumerate(zip(sort_descending(box_min), sort_descending(box_max))):
                if lo > hi:
                    errors.append(
                        f"box_min_mm exceeds box_max_mm in sorted slot {i} ({lo} > {hi})"
                    )

        if errors:
            raise MalformedRuleError("Malformed constraints:\n  " + "\n  ".join(errors))

    @property
    def is_empty(self) -> bool:
        """True when no field is populated (vacuously satisfied)."""
        return all(getattr(self, name) is None for name in CONSTRAINT_FIELDS)

    @classmethod
    def from_dict(cls, raw: dict | None) -> "ConstraintSet":
        """
        Build a ConstraintSet from deserialized config.

        Unknown keys are rejected so a misspelled field cannot silently
        disable a check.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise MalformedRuleError(f"Malformed constraints: expected a mapping, got {raw!r}")

        unknown = sorted(set(raw) - set(CONSTRAINT_FIELDS))
        if unknown:
            raise MalformedRuleError(
                "Malformed constraints:\n  unknown field(s): " + ", ".join(unknown)
            )
        return cls(**raw)

    def to_dict(self) -> dict:
        """Serialize populated fields only."""
        out = {}
        for name in CONSTRAINT_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, CombinedDimensions):
                value = {"max_mm": value.max_mm, "method": value.method}
            elif isinstance(value, tuple):
                value = list(value)
            out[name] = value
        return out


def _combined_from_dict(raw: dict, errors: list[str]) -> CombinedDimensions | None:
    unknown = sorted(set(raw) - {"max_mm", "method"})
    if unknown:
        errors.append("combined_dimensions has unknown field(s): " + ", ".join(unknown))
        return None
    if "max_mm" not in raw or "method" not in raw:
        errors.append("combined_dimensions requires both max_mm and method")
        return None
    return CombinedDimensions(max_mm=raw["max_mm"], method=raw["method"])


def _check_combined(combined: CombinedDimensions, errors: list[str]) -> None:
    _check_bound("combined_dimensions.max_mm", combined.max_mm, errors)
    if combined.max_mm is None:
        errors.append("combined_dimensions.max_mm is required")
    if combined.method not in COMBINED_METHOD_NAMES:
        errors.append(
            f"combined_dimensions.method {combined.method!r} is not one of "
            f"{', '.join(COMBINED_METHOD_NAMES)}"
        )
    elif combined.method in UNSUPPORTED_METHODS:
        errors.append(
            f"combined_dimensions.method {combined.method!r} has no formula; "
            "declare standard_sum, length_plus_girth or circumference"
        )


# =============================================================================
# SERVICE RULE
# =============================================================================

@dataclass(frozen=True)
class ServiceRule:
    """
    One eligibility path for a service.

    validation_type is a reporting tag only. The evaluator checks every
    populated field of constraints regardless of its value.
    """

    service_id: str
    service_name: str
    carrier: str
    validation_type: ValidationType
    constraints: ConstraintSet = field(default_factory=ConstraintSet)

    def __post_init__(self) -> None:
        errors: list[str] = []
        if not isinstance(self.service_id, str) or not self.service_id.strip():
            errors.append(f"service_id must be a non-empty string, got {self.service_id!r}")
        for name in ("service_name", "carrier"):
            if not isinstance(getattr(self, name), str):
                errors.append(f"{name} must be a string, got {getattr(self, name)!r}")
        if self.validation_type not in VALIDATION_TYPES:
            errors.append(
                f"validation_type {self.validation_type!r} is not one of "
                f"{', '.join(VALIDATION_TYPES)}"
            )
        if not isinstance(self.constraints, ConstraintSet):
            errors.append(f"constraints must be a ConstraintSet, got {type(self.constraints).__name__}")
        if errors:
            raise MalformedRuleError(
                f"Malformed rule {self.service_id!r}:\n  " + "\n  ".join(errors)
            )

    @classmethod
    def from_dict(cls, raw: dict) -> "ServiceRule":
        """Build a rule from a current-schema record."""
        if not isinstance(raw, dict):
            raise MalformedRuleError(f"Malformed rule: expected a mapping, got {raw!r}")
        service_id = raw.get("service_id")
        missing = [
            k for k in ("service_id", "service_name", "carrier", "validation_type")
            if k not in raw
        ]
        if missing:
            raise MalformedRuleError(
                f"Malformed rule {service_id!r}:\n  missing field(s): " + ", ".join(missing)
            )
        try:
            constraints = ConstraintSet.from_dict(raw.get("constraints"))
        except MalformedRuleError as e:
            raise MalformedRuleError(f"Malformed rule {service_id!r}: {e}") from None
        return cls(
            service_id=raw["service_id"],
            service_name=raw["service_name"],
            carrier=raw["carrier"],
            validation_type=raw["validation_type"],
            constraints=constraints,
        )

    def to_dict(self) -> dict:
        return {
            "service_id": self.service_id,
            "service_name": self.service_name,
            "carrier": self.carrier,
            "validation_type": self.validation_type,
            "constraints": self.constraints.to_dict(),
        }


# =============================================================================
# SERVICES AND RULE TABLE
# =============================================================================

@dataclass(frozen=True)
class Service:
    """A logical service and its ordered alternative rules."""

    service_id: str
    service_name: str
    carrier: str
    rules: tuple[ServiceRule, ...]


class RuleTable:
    """
    Ordered, read-only sequence of service rules.

    Insertion order only affects output order, never eligibility.
    """

    def __init__(self, rules: Iterable[ServiceRule] = ()):
        rules = tuple(rules)
        for rule in rules:
            if not isinstance(rule, ServiceRule):
                raise MalformedRuleError(
                    f"RuleTable accepts ServiceRule records, got {type(rule).__name__}"
                )
        self._rules = rules

    def __iter__(self) -> Iterator[ServiceRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __getitem__(self, index: int) -> ServiceRule:
        return self._rules[index]

    def __repr__(self) -> str:
        return f"RuleTable({len(self._rules)} rules, {len(self.service_ids)} services)"

    @property
    def rules(self) -> tuple[ServiceRule, ...]:
        return self._rules

    @property
    def service_ids(self) -> tuple[str, ...]:
        """Unique service ids in first-seen order."""
        return tuple(dict.fromkeys(r.service_id for r in self._rules))

    @property
    def carriers(self) -> tuple[str, ...]:
        """Unique carriers in first-seen order."""
        return tuple(dict.fromkeys(r.carrier for r in self._rules))

    def services(self) -> tuple[Service, ...]:
        """
        Group rules by service_id, preserving first-seen order.

        Name and carrier come from the first rule of each group.
        """
        groups: dict[str, list[ServiceRule]] = {}
        for rule in self._rules:
            groups.setdefault(rule.service_id, []).append(rule)
        return tuple(
            Service(
                service_id=service_id,
                service_name=rules[0].service_name,
                carrier=rules[0].carrier,
                rules=tuple(rules),
            )
            for service_id, rules in groups.items()
        )

    def filter(
        self,
        carrier: str | None = None,
        validation_type: str | None = None,
    ) -> "RuleTable":
        """Subset of rules matching carrier and/or validation_type."""
        return RuleTable(
            r for r in self._rules
            if (carrier is None or r.carrier == carrier)
            and (validation_type is None or r.validation_type == validation_type)
        )

    def to_frame(self) -> pl.DataFrame:
        """One row per rule, in the reference CSV layout."""
        from .data.loaders.csv_table import rules_to_frame
        return rules_to_frame(self)


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class ServiceMatch:
    """An eligible service and the rule(s) that accepted the package."""

    service_id: str
    service_name: str
    carrier: str
    matched_rules: tuple[ServiceRule, ...]

    @property
    def validation_types(self) -> tuple[str, ...]:
        return tuple(r.validation_type for r in self.matched_rules)


@dataclass(frozen=True)
class EligibilityResult:
    """Ordered eligible services for one (Package, RuleTable) pair."""

    package: Package
    matches: tuple[ServiceMatch, ...] = ()

    def __iter__(self) -> Iterator[ServiceMatch]:
        return iter(self.matches)

    def __len__(self) -> int:
        return len(self.matches)

    def __contains__(self, service_id: object) -> bool:
        return service_id in self.service_ids

    def __bool__(self) -> bool:
        return bool(self.matches)

    @property
    def service_ids(self) -> tuple[str, ...]:
        return tuple(m.service_id for m in self.matches)

    def get(self, service_id: str) -> ServiceMatch | None:
        for match in self.matches:
            if match.service_id == service_id:
                return match
        return None

    def to_frame(self) -> pl.DataFrame:
        """One row per eligible service."""
        return pl.DataFrame(
            {
                "service_id": [m.service_id for m in self.matches],
                "service_name": [m.service_name for m in self.matches],
                "carrier": [m.carrier for m in self.matches],
                "validation_types": [list(m.validation_types) for m in self.matches],
                "matched_rule_count": [len(m.matched_rules) for m in self.matches],
            },
            schema={
                "service_id": pl.Utf8,
                "service_name": pl.Utf8,
                "carrier": pl.Utf8,
                "validation_types": pl.List(pl.Utf8),
                "matched_rule_count": pl.Int64,
            },
        )


__all__ = [
    "ValidationType",
    "CombinedMethod",
    "VALIDATION_TYPES",
    "COMBINED_METHOD_NAMES",
    "UNSUPPORTED_METHODS",
    "CONSTRAINT_FIELDS",
    "Dimensions",
    "sort_descending",
    "Package",
    "CombinedDimensions",
    "ConstraintSet",
    "ServiceRule",
    "Service",
    "RuleTable",
    "ServiceMatch",
    "EligibilityResult",
]
