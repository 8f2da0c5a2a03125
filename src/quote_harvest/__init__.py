"""Dated, per-category quote snapshots harvested from a paginated HTML source."""

__version__ = "0.1.0"
