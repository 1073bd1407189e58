"""
Eligibility Aggregator

Turns per-rule results into the eligible-service list for one package.
A service is eligible when at least one of its rules passes.
"""

from .model import EligibilityResult, Package, RuleTable, ServiceMatch
from .evaluate import evaluate


def eligible_services(pkg: Package, table: RuleTable) -> EligibilityResult:
    """
    Evaluate a package against every service in a rule table.

    Args:
        pkg: Package to check
        table: Rule table (rules sharing a service_id are alternatives)

    Returns:
        EligibilityResult with services in first-seen table order. Each
        match lists every rule that accepted the package. No eligible
        service gives an empty result, not an error.
    """
    matches = []
    for service in table.services():
        matched = tuple(rule for rule in service.rules if evaluate(pkg, rule.constraints))
        if matched:
            matches.append(
                ServiceMatch(
                    service_id=service.service_id,
                    service_name=service.service_name,
                    carrier=service.carrier,
                    matched_rules=matched,
                )
            )
    return EligibilityResult(package=pkg, matches=tuple(matches))


def is_eligible(pkg: Package, table: RuleTable, service_id: str) -> bool:
    """True if any rule for service_id accepts the package."""
    return any(
        evaluate(pkg, rule.constraints)
        for rule in table
        if rule.service_id == service_id
    )


__all__ = ["eligible_services", "is_eligible"]
