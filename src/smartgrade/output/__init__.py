"""
Output module.

CSV tables for assignments, course summaries and rosters.
"""

from .export import (
    assignment_headers,
    assignment_table,
    roster_table,
    to_csv_text,
    write_csv,
)
from .formatting import format_number, format_weight

__all__ = [
    "assignment_headers",
    "assignment_table",
    "roster_table",
    "to_csv_text",
    "write_csv",
    "format_number",
    "format_weight",
]
