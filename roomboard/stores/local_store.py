"""Booking store backed by a local JSON document."""

import json
from datetime import date
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError
from structlog import get_logger

from roomboard.config import settings
from roomboard.models import BoardSnapshot, HistoryRecord, Room, Transaction
from roomboard.services.room_registry import generate_rooms, is_current_layout
from roomboard.stores.base import BookingStore
from roomboard.transformers import DocumentTransformer

logger = get_logger(__name__)


class LocalStore(BookingStore):
    """Keeps the board in one JSON document on disk.

    The document has one key per section (rooms, history, transactions).
    Every write rewrites the whole document, so a checkout lands atomically.
    Unreadable sections fall back to defaults instead of failing.
    """

    def __init__(self, path: Optional[str | Path] = None):
        super().__init__()
        self.path = Path(path or settings.storage.path)
        self.rooms_key = settings.storage.rooms_key
        self.history_key = settings.storage.history_key
        self.transactions_key = settings.storage.transactions_key

    def _read_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Failed to read local document", path=str(self.path), error=str(e))
            return {}
        if not isinstance(document, dict):
            logger.error("Local document is not an object, ignoring", path=str(self.path))
            return {}
        return document

    def _write_document(self, document: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def _rooms_from(self, document: dict[str, Any]) -> tuple[list[Room], bool]:
        """Parse saved rooms.

        Returns:
            (rooms, regenerated) where regenerated is True when defaults were used
        """
        items = document.get(self.rooms_key)
        if items is None:
            return generate_rooms(), True
        try:
            rooms = DocumentTransformer.parse_rooms(items)
        except ValidationError as e:
            logger.error("Failed to parse saved rooms, using defaults", error=str(e))
            return generate_rooms(), True
        if not is_current_layout(rooms):
            logger.warning(
                "Saved rooms do not match the current layout, regenerating",
                saved_count=len(rooms),
            )
            return generate_rooms(), True
        return rooms, False

    def _history_from(self, document: dict[str, Any]) -> list[HistoryRecord]:
        items = document.get(self.history_key)
        if items is None:
            return []
        try:
            return DocumentTransformer.parse_history(items)
        except ValidationError as e:
            logger.error("Failed to parse saved history, starting empty", error=str(e))
            return []

    def _transactions_from(self, document: dict[str, Any]) -> list[Transaction]:
        items = document.get(self.transactions_key)
        if items is None:
            return []
        try:
            return DocumentTransformer.parse_transactions(items)
        except ValidationError as e:
            logger.error("Failed to parse saved transactions, starting empty", error=str(e))
            return []

    async def load(self) -> BoardSnapshot:
        document = self._read_document()
        rooms, regenerated = self._rooms_from(document)
        history = self._history_from(document)
        if regenerated:
            await self.seed_rooms(rooms)
        logger.info(
            "Loaded local board",
            path=str(self.path),
            room_count=len(rooms),
            history_count=len(history),
        )
        return BoardSnapshot(rooms=rooms, history=history)

    async def seed_rooms(self, rooms: list[Room]) -> None:
        document = self._read_document()
        self._put_rooms(document, rooms)
        self._write_document(document)

    def _put_rooms(self, document: dict[str, Any], updates: list[Room]) -> None:
        by_id = {room.id: room for room in updates}
        rooms, _ = self._rooms_from(document)
        document[self.rooms_key] = DocumentTransformer.dump(
            [by_id.get(r.id, r) for r in rooms]
        )

    def _append_transaction(self, document: dict[str, Any], transaction: Transaction) -> bool:
        transactions = self._transactions_from(document)
        if any(t.id == transaction.id for t in transactions):
            return False
        transactions.append(transaction)
        document[self.transactions_key] = DocumentTransformer.dump(transactions)
        return True

    async def save_room(self, room: Room) -> None:
        document = self._read_document()
        self._put_rooms(document, [room])
        self._write_document(document)
        logger.debug("Saved room", room_id=room.id, status=room.status.value)

    async def check_in(self, room: Room, transaction: Transaction) -> None:
        document = self._read_document()
        self._put_rooms(document, [room])
        self._append_transaction(document, transaction)
        self._write_document(document)
        logger.debug("Saved check-in", room_id=room.id, transaction_id=transaction.id)

    async def check_out(self, room: Room, record: HistoryRecord) -> None:
        document = self._read_document()
        self._put_rooms(document, [room])
        history = self._history_from(document)
        document[self.history_key] = DocumentTransformer.dump([record, *history])
        self._write_document(document)
        logger.debug("Saved checkout", room_id=room.id, history_id=record.id)

    async def add_transaction(self, transaction: Transaction) -> None:
        document = self._read_document()
        if self._append_transaction(document, transaction):
            self._write_document(document)
        else:
            logger.debug("Ledger entry already stored", transaction_id=transaction.id)

    async def list_transactions(self, payment_date: date) -> list[Transaction]:
        document = self._read_document()
        return [
            t for t in self._transactions_from(document) if t.payment_date == payment_date
        ]
