from __future__ import annotations

import math
from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: str | None, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def coerce_hours(value: Any) -> float:
    """Parse an hour amount, falling back to 0 for anything unusable.

    Accepts numbers and numeric strings ("2", "1.5", " 3 "). None, booleans,
    NaN/inf and unparsable strings give 0.0.
    """

    if value is None or isinstance(value, bool):
        return 0.0
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(hours) or math.isinf(hours):
        return 0.0
    return hours


def coerce_flag(value: Any) -> bool:
    """Interpret a loosely typed boolean flag; missing means False."""

    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def coerce_ids(values: Any, single: Any = None) -> list[int]:
    """Normalize an id list from a request body (``ids`` or a single ``id``)."""

    raw = values if values is not None else ([single] if single is not None else [])
    if not isinstance(raw, (list, tuple)):
        raw = [raw]

    ids: list[int] = []
    for v in raw:
        try:
            ids.append(int(v))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid id: {v!r}")
    return ids
