"""Record an ad-hoc daily payment against an occupied room."""

from datetime import date, datetime
from typing import Any, Optional

from roomboard.models import Transaction
from roomboard.services.board_state import BoardState
from roomboard.services.errors import RoomNotOccupiedError
from roomboard.services.mutations.base_mutation import Mutation, require_amount
from roomboard.stores.base import BookingStore


class AddPaymentMutation(Mutation):
    """Ledger entry only; the room itself does not change."""

    def __init__(self, room_id: str, amount: Any):
        super().__init__(room_id)
        self.amount = amount
        self.transaction: Optional[Transaction] = None

    def apply(self, state: BoardState, now: datetime, today: date) -> None:
        amount = require_amount(self.amount, "amount", allow_zero=False)
        room = state.registry.get(self.room_id)
        if not room.is_occupied:
            raise RoomNotOccupiedError(f"Room {room.id} is not occupied")

        self.transaction = Transaction(
            room_number=room.number,
            guest_name=room.guest_name,
            entry_number=room.entry_number,
            amount=amount,
            payment_date=today,
        )
        self.logger.info("Payment recorded", amount=amount)

    async def persist(self, store: BookingStore) -> None:
        await store.add_transaction(self.transaction)
