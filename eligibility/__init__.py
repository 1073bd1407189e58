"""
Shipping Service Eligibility

Decides which carrier services accept a package, given its weight and three
dimensions, against a table of per-service packaging rules.

USAGE
-----
    from eligibility import Package, eligible_services, load_rule_table

    table = load_rule_table()
    result = eligible_services(Package(5000, 1300, 200, 100), table)
    result.service_ids
"""

from .version import VERSION
from .errors import EligibilityError, MalformedRuleError, InvalidPackageError
from .model import (
    Package,
    CombinedDimensions,
    ConstraintSet,
    ServiceRule,
    Service,
    RuleTable,
    ServiceMatch,
    EligibilityResult,
    VALIDATION_TYPES,
    COMBINED_METHOD_NAMES,
)
from .dimensions import COMBINED_METHODS, combined_value, girth, length_plus_girth
from .box_fit import fits
from .evaluate import evaluate, failed_checks, conditions
from .aggregate import eligible_services, is_eligible
from .check_packages import check_packages, supplement_packages, calculate, to_long
from .data import load_rule_table, rules_from_records

__all__ = [
    "VERSION",
    # Errors
    "EligibilityError",
    "MalformedRuleError",
    "InvalidPackageError",
    # Model
    "Package",
    "CombinedDimensions",
    "ConstraintSet",
    "ServiceRule",
    "Service",
    "RuleTable",
    "ServiceMatch",
    "EligibilityResult",
    "VALIDATION_TYPES",
    "COMBINED_METHOD_NAMES",
    # Engine
    "COMBINED_METHODS",
    "combined_value",
    "girth",
    "length_plus_girth",
    "fits",
    "evaluate",
    "failed_checks",
    "conditions",
    "eligible_services",
    "is_eligible",
    # Batch
    "check_packages",
    "supplement_packages",
    "calculate",
    "to_long",
    # Data
    "load_rule_table",
    "rules_from_records",
]
