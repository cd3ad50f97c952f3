"""Report output helpers."""

from .export import LINEUP_HEADERS, lineup_rows, lineup_to_csv, write_lineup_csv

__all__ = ["LINEUP_HEADERS", "lineup_rows", "lineup_to_csv", "write_lineup_csv"]
