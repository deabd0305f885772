"""Close the stay in an occupied room."""

from datetime import date, datetime
from typing import Optional

from roomboard.models import HistoryRecord, Room
from roomboard.services.board_state import BoardState
from roomboard.services.errors import RoomNotOccupiedError
from roomboard.services.mutations.base_mutation import Mutation
from roomboard.stores.base import BookingStore


class CheckOutMutation(Mutation):
    """occupied -> available, recording the stay in history."""

    def __init__(self, room_id: str):
        super().__init__(room_id)
        self.room: Optional[Room] = None
        self.record: Optional[HistoryRecord] = None

    def apply(self, state: BoardState, now: datetime, today: date) -> None:
        room = state.registry.get(self.room_id)
        if not room.is_occupied:
            raise RoomNotOccupiedError(f"Room {room.id} is not occupied")

        self.record = HistoryRecord(
            room_number=room.number,
            guest_name=room.guest_name,
            price=room.price,
            entry_number=room.entry_number,
            check_in_time=room.check_in_time,
            # a check-in pushed from another clock may be slightly ahead of ours
            check_out_time=max(now, room.check_in_time),
        )
        self.room = room.vacated()
        state.registry.replace(self.room)
        state.history.insert(0, self.record)
        self.logger.info("Checked out", guest_name=self.record.guest_name, history_id=self.record.id)

    async def persist(self, store: BookingStore) -> None:
        await store.check_out(self.room, self.record)
