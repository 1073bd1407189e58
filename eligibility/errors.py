"""
Eligibility Errors

Both errors are structural (bad input), never transient. Rule problems are
raised while loading a rule table; package problems are raised before any
evaluation starts.
"""


class EligibilityError(ValueError):
    """Base class for all eligibility errors."""


class MalformedRuleError(EligibilityError):
    """A service rule or constraint set cannot be registered."""


class InvalidPackageError(EligibilityError):
    """Package weight or dimensions are negative, non-finite or not numbers."""


__all__ = [
    "EligibilityError",
    "MalformedRuleError",
    "InvalidPackageError",
]
