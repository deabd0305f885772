"""Check a guest in to an available room."""

from datetime import date, datetime
from typing import Any, Optional

from roomboard.models import Room, Transaction
from roomboard.services.board_state import BoardState
from roomboard.services.errors import InvalidBookingError, RoomOccupiedError
from roomboard.services.mutations.base_mutation import Mutation, require_amount
from roomboard.stores.base import BookingStore


class CheckInMutation(Mutation):
    """available -> occupied, plus a ledger entry for the initial price."""

    def __init__(self, room_id: str, guest_name: str, price: Any, entry_number: str = ""):
        super().__init__(room_id)
        self.guest_name = guest_name
        self.price = price
        self.entry_number = entry_number
        self.room: Optional[Room] = None
        self.transaction: Optional[Transaction] = None

    def apply(self, state: BoardState, now: datetime, today: date) -> None:
        guest_name = (self.guest_name or "").strip()
        if not guest_name:
            raise InvalidBookingError("Guest name is required")
        price = require_amount(self.price, "price")
        entry_number = (self.entry_number or "").strip()

        room = state.registry.get(self.room_id)
        if room.is_occupied:
            raise RoomOccupiedError(f"Room {room.id} is already occupied by {room.guest_name}")

        self.room = room.occupied_by(guest_name, price, entry_number, now)
        state.registry.replace(self.room)
        self.transaction = Transaction(
            room_number=room.number,
            guest_name=guest_name,
            entry_number=entry_number,
            amount=price,
            payment_date=today,
        )
        self.logger.info("Checked in", guest_name=guest_name, price=price)

    async def persist(self, store: BookingStore) -> None:
        await store.check_in(self.room, self.transaction)
