"""
Eligibility Data

Reference rule table and loaders.

Structure:
    - reference/: Bundled carrier service rules (services.csv) and layout
    - loaders/: CSV and record/JSON loaders
"""

from pathlib import Path

from ..errors import MalformedRuleError
from ..model import RuleTable
from .reference import SERVICES_FILE
from .loaders import (
    load_rules_csv,
    load_rules_json,
    rules_from_frame,
    rules_from_records,
    rules_to_frame,
    rule_table_to_records,
    write_rules_csv,
    write_rules_json,
)


REFERENCE_DIR = Path(__file__).parent / "reference"
DEFAULT_RULES_FILE = SERVICES_FILE


def load_rule_table(path: str | Path | None = None) -> RuleTable:
    """
    Load a rule table, dispatching on file suffix.

    Args:
        path: .csv or .json rule file (bundled services.csv if not provided)

    Returns:
        Validated RuleTable

    Raises:
        MalformedRuleError: unsupported file type or invalid rules
    """
    path = Path(path) if path is not None else DEFAULT_RULES_FILE
    suffix = path.suffix.lower()

    if suffix == ".csv":
        return load_rules_csv(path)
    if suffix == ".json":
        return load_rules_json(path)

    raise MalformedRuleError(f"Unsupported rule file type: {path.name} (expected .csv or .json)")


__all__ = [
    "REFERENCE_DIR",
    "DEFAULT_RULES_FILE",
    "load_rule_table",
    "load_rules_csv",
    "load_rules_json",
    "rules_from_frame",
    "rules_from_records",
    "rules_to_frame",
    "rule_table_to_records",
    "write_rules_csv",
    "write_rules_json",
]
