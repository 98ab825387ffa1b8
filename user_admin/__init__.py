"""Privileged user administration for the cleaning-operations dashboard."""

__version__ = "0.1.0"
