"""Number formatting for exported tables."""


def format_number(value: float, decimals: int = 2) -> str:
    """Fixed-point text, e.g. ``35.50``."""
    return f"{value:.{decimals}f}"


def format_weight(value: float) -> str:
    """Weight as typed by a teacher: ``50`` rather than ``50.0``, ``12.5`` kept."""
    return f"{value:g}"
