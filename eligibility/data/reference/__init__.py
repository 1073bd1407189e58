"""
Reference Data

Carrier service rules and the file layout used to store them.
"""

from .services import (
    SERVICES_FILE,
    CSV_COLUMNS,
    NUMERIC_COLUMNS,
    BOX_SEPARATOR,
)

__all__ = [
    "SERVICES_FILE",
    "CSV_COLUMNS",
    "NUMERIC_COLUMNS",
    "BOX_SEPARATOR",
]
