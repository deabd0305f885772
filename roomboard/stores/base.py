"""Base class for booking persistence backends."""

from abc import ABC, abstractmethod
from datetime import date

from roomboard.models import BoardSnapshot, HistoryRecord, Room, Transaction


class BookingStore(ABC):
    """Authoritative copy of rooms, history and the ledger.

    Each store should:
    1. Return the full board on load(), seeding any missing layout rooms
    2. Persist single-room writes with last-write-wins semantics
    3. Commit check-in (room + ledger entry) and checkout (room reset +
       history insert) each as one write
    4. Append ledger entries idempotently and query them by payment date
    """

    def __init__(self, name: str | None = None):
        self.name = name or self.__class__.__name__

    @abstractmethod
    async def load(self) -> BoardSnapshot:
        """Read the full board state."""

    @abstractmethod
    async def seed_rooms(self, rooms: list[Room]) -> None:
        """Write rooms, inserting or replacing by id."""

    @abstractmethod
    async def save_room(self, room: Room) -> None:
        """Persist one room."""

    @abstractmethod
    async def check_in(self, room: Room, transaction: Transaction) -> None:
        """Persist an occupied room together with its opening ledger entry."""

    @abstractmethod
    async def check_out(self, room: Room, record: HistoryRecord) -> None:
        """Persist a vacated room together with its history record.

        Args:
            room: The room already reset to the available defaults
            record: The completed stay
        """

    @abstractmethod
    async def add_transaction(self, transaction: Transaction) -> None:
        """Append a ledger entry; repeating the same entry id is a no-op."""

    @abstractmethod
    async def list_transactions(self, payment_date: date) -> list[Transaction]:
        """Ledger entries recorded on a payment date, in insertion order."""

    async def close(self) -> None:
        """Release connections. Default: nothing to release."""
        return None
