"""Display formatting helpers."""
from __future__ import annotations

BYTE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def format_bytes(value: float) -> str:
    """Human-readable byte size using 1024 steps, e.g. '1.50 KB'."""
    size = float(value)
    unit = 0
    while size >= 1024.0 and unit + 1 < len(BYTE_UNITS):
        size /= 1024.0
        unit += 1
    if unit == 0:
        return f"{int(value)} B"
    return f"{size:.2f} {BYTE_UNITS[unit]}"


def format_count(value: int) -> str:
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return str(value)


def format_extension(ext: str) -> str:
    return f".{ext}" if ext else ""


