"""
Argument string helpers shared by commands.

Arguments are ``,`` separated fields; a field naming several characters
separates them with ``;``. Optional trailing fields are recognised by type,
not position: a float is a speed, a boolean is the smooth flag, anything
else is ignored. ``null`` in an image or clip field means "nothing", which
is different from an empty field ("use the default").
"""

from __future__ import annotations

import math
from typing import Optional

NULL = "null"


def split_fields(args: str) -> list[str]:
    """Split on ``,`` and strip whitespace. An empty string yields []."""
    if not args.strip():
        return []
    return [f.strip() for f in args.split(",")]


def split_targets(field: str) -> list[str]:
    """Split a ``;`` target list, dropping empty names."""
    return [t.strip() for t in field.split(";") if t.strip()]


def try_float(value: str) -> Optional[float]:
    """Parse a finite float, or None."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def try_bool(value: str) -> Optional[bool]:
    """Parse ``true``/``false`` (any case), or None."""
    lowered = str(value).strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def parse_float(value: Optional[str], default: float) -> float:
    """Parse value, falling back to default when missing or malformed."""
    if value is None:
        return default
    result = try_float(value)
    return default if result is None else result


def probe_options(fields: list[str], speed: float, smooth: bool) -> tuple[float, bool]:
    """
    Read type-probed optional fields.

    The last float wins as speed and the last boolean as smooth.

    Returns:
        (speed, smooth)
    """
    for field in fields:
        number = try_float(field)
        if number is not None:
            speed = number
            continue
        flag = try_bool(field)
        if flag is not None:
            smooth = flag
    return speed, smooth


def is_null(value: str) -> bool:
    return value.strip().lower() == NULL
