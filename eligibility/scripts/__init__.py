"""Command-line entry points (run with python -m eligibility.scripts.<name>)."""
