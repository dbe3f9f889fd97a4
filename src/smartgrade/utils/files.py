"""Filesystem helpers for the gradebook store and CSV exports."""

import os
import re
import unicodedata
from pathlib import Path

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def ensure_dir(path: Path) -> Path:
    """Create ``path`` (and parents) if missing and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_filename(name: str, max_length: int = 255) -> str:
    """Turn a rubric title or store key into a portable file name stem.

    Accents are folded to ASCII, whitespace runs become one underscore and
    characters rejected by common filesystems are dropped.

    Args:
        name: Rubric title, owner key or similar free text
        max_length: Maximum length of the result

    Returns:
        File name stem, ``"unnamed"`` when nothing usable is left
    """
    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    stem = _UNSAFE_CHARS.sub("", re.sub(r"\s+", "_", folded)).strip("._ ")
    return stem[:max_length] or "unnamed"


def csv_export_path(label: str, prefix: str = "grades_", directory: Path | None = None) -> Path:
    """Default destination of an export, e.g. ``grades_Lab_Report.csv``."""
    filename = f"{prefix}{safe_filename(label)}.csv"
    return directory / filename if directory else Path(filename)


def write_atomic(path: Path, data: bytes) -> None:
    """Write through a sibling temp file so readers never see half a document.

    Raises:
        OSError: If the file cannot be written or moved into place
    """
    ensure_dir(path.parent)
    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_bytes(data)
        os.replace(tmp, path)
    finally:
        tmp.unlink(missing_ok=True)
