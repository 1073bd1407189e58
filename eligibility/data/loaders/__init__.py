"""
Data Loaders

Rule table loaders for CSV files and deserialized records / JSON.
"""

from .csv_table import (
    load_rules_csv,
    rules_from_frame,
    rules_to_frame,
    write_rules_csv,
)
from .json_records import (
    rules_from_records,
    load_rules_json,
    rule_table_to_records,
    write_rules_json,
)

__all__ = [
    "load_rules_csv",
    "rules_from_frame",
    "rules_to_frame",
    "write_rules_csv",
    "rules_from_records",
    "load_rules_json",
    "rule_table_to_records",
    "write_rules_json",
]
