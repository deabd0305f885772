"""Filtering of the stay history."""

from roomboard.models import HistoryRecord


def search_history(history: list[HistoryRecord], term: str = "") -> list[HistoryRecord]:
    """Case-insensitive match on guest name or room number, order preserved."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(history)
    return [
        record
        for record in history
        if needle in record.guest_name.lower() or needle in record.room_number.lower()
    ]
