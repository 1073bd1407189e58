"""Eligibility calculator version, stamped on batch output."""

VERSION = "2026.10.19"
