"""Transformer between the local JSON document and board models.

The local document keeps the camelCase keys the board has always written
(guestName, checkInTime, ...). Parsing is strict: one bad entry rejects
the whole list, and the caller falls back to defaults.
"""

from typing import Any

from pydantic import BaseModel, TypeAdapter

from roomboard.models import HistoryRecord, Room, Transaction

_rooms_adapter = TypeAdapter(list[Room])
_history_adapter = TypeAdapter(list[HistoryRecord])
_transactions_adapter = TypeAdapter(list[Transaction])


class DocumentTransformer:
    """Maps local document sections to models and back."""

    @staticmethod
    def parse_rooms(items: Any) -> list[Room]:
        """Parse the rooms section.

        Raises:
            pydantic.ValidationError: If the section is not a valid room list
        """
        return _rooms_adapter.validate_python(items)

    @staticmethod
    def parse_history(items: Any) -> list[HistoryRecord]:
        return _history_adapter.validate_python(items)

    @staticmethod
    def parse_transactions(items: Any) -> list[Transaction]:
        return _transactions_adapter.validate_python(items)

    @staticmethod
    def dump(models: list[BaseModel]) -> list[dict[str, Any]]:
        """Serialize models with their camelCase aliases."""
        return [m.model_dump(mode="json", by_alias=True) for m in models]
