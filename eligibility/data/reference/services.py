"""
Service Rules Table

Packaging limits for EVRI, Amazon, UPS, FedEx, Royal Mail, DHL and USPS
services, one row per rule. Weights in grams, lengths in millimetres.
Last updated: 2026-10-19

FILE LAYOUT
-----------
services.csv has one row per rule. Rows sharing a service_id are
alternative acceptance paths for the same service (eligible if ANY passes).

    combined_max_mm + combined_method  -> combined_dimensions
    box_max_mm, box_min_mm             -> "LxWxH", any orientation

Empty cells mean the field is unconstrained.
"""

from pathlib import Path


SERVICES_FILE = Path(__file__).parent / "services.csv"

CSV_COLUMNS = [
    # Identity
    "service_id", "service_name", "carrier", "validation_type",
    # Weight
    "weight_min_g", "weight_max_g",
    # Dimensions
    "max_single_dimension_mm", "combined_max_mm", "combined_method",
    "max_girth_mm", "max_length_plus_girth_mm",
    # Box fit
    "box_max_mm", "box_min_mm",
]

NUMERIC_COLUMNS = [
    "weight_min_g",
    "weight_max_g",
    "max_single_dimension_mm",
    "combined_max_mm",
    "max_girth_mm",
    "max_length_plus_girth_mm",
]

BOX_SEPARATOR = "x"
