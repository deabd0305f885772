"""Booking store backed by the hosted relational backend."""

from datetime import date
from typing import Optional

from structlog import get_logger

from roomboard.clients import BookingStoreClient, RoomChangeFeed
from roomboard.models import BoardSnapshot, HistoryRecord, Room, Transaction
from roomboard.services.room_registry import complete_layout
from roomboard.stores.base import BookingStore
from roomboard.transformers import RowTransformer

logger = get_logger(__name__)


class RemoteStore(BookingStore):
    """Reads and writes the rooms, history and transactions tables.

    Committed room writes are announced on the change feed when one is
    configured, so other boards pick them up. The feed is owned, and
    closed, by whoever created it.
    """

    def __init__(
        self,
        client: Optional[BookingStoreClient] = None,
        feed: Optional[RoomChangeFeed] = None,
    ):
        super().__init__()
        self.client = client or BookingStoreClient()
        self.feed = feed

    async def _announce(self, room: Room) -> None:
        if self.feed is not None:
            await self.feed.publish(room)

    async def load(self) -> BoardSnapshot:
        stored = RowTransformer.rooms_from_rows(await self.client.get_rooms())
        rooms, filled = complete_layout(stored)
        if filled:
            # Empty table, partial seed, or rows that failed validation
            logger.info(
                "Backend rooms incomplete, seeding missing layout rooms",
                stored_count=len(stored),
                missing=[r.id for r in filled],
            )
            await self.seed_rooms(filled)
        history = RowTransformer.history_from_rows(await self.client.get_history())
        logger.info(
            "Loaded remote board",
            room_count=len(rooms),
            history_count=len(history),
        )
        return BoardSnapshot(rooms=rooms, history=history)

    async def seed_rooms(self, rooms: list[Room]) -> None:
        await self.client.upsert_rooms([RowTransformer.room_to_row(r) for r in rooms])
        logger.info("Seeded rooms", room_count=len(rooms))

    async def save_room(self, room: Room) -> None:
        await self.client.upsert_rooms([RowTransformer.room_to_row(room)])
        await self._announce(room)

    async def check_in(self, room: Room, transaction: Transaction) -> None:
        await self.client.check_in_room(
            RowTransformer.room_to_row(room),
            RowTransformer.transaction_to_row(transaction),
        )
        await self._announce(room)

    async def check_out(self, room: Room, record: HistoryRecord) -> None:
        await self.client.check_out_room(room.id, RowTransformer.history_to_row(record))
        await self._announce(room)

    async def add_transaction(self, transaction: Transaction) -> None:
        await self.client.insert_transaction(RowTransformer.transaction_to_row(transaction))

    async def list_transactions(self, payment_date: date) -> list[Transaction]:
        rows = await self.client.get_transactions(payment_date)
        return RowTransformer.transactions_from_rows(rows)
