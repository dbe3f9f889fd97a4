"""
Utility module.

Common utilities for logging, file handling and identifier generation.
"""

from .files import csv_export_path, ensure_dir, safe_filename, write_atomic
from .ids import (
    IdGenerator,
    SequentialIdGenerator,
    ShortIdGenerator,
    UuidGenerator,
    unique_id,
)
from .logging import get_logger, resolve_level, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "resolve_level",
    "ensure_dir",
    "safe_filename",
    "csv_export_path",
    "write_atomic",
    "IdGenerator",
    "UuidGenerator",
    "ShortIdGenerator",
    "SequentialIdGenerator",
    "unique_id",
]
