"""Value coercions shared by the board models."""

import math
from datetime import datetime, timezone
from typing import Any, Optional


def as_amount(value: Any) -> float:
    """Coerce a price or amount to float.

    Missing, empty and non-numeric values count as 0, matching how the
    board has always stored an empty price on available rooms.
    """
    if value is None or value == "" or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
