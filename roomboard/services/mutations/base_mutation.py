"""Base class for board mutations."""

import math
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any

from structlog import get_logger

from roomboard.services.board_state import BoardState
from roomboard.services.errors import InvalidBookingError
from roomboard.stores.base import BookingStore

logger = get_logger(__name__)


def require_amount(value: Any, field: str, allow_zero: bool = True) -> float:
    """Parse a price or payment amount entered by the user.

    Raises:
        InvalidBookingError: If the value is not a finite number in range
    """
    if isinstance(value, bool):
        raise InvalidBookingError(f"{field} must be a number")
    try:
        amount = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidBookingError(f"{field} must be a number, got {value!r}") from e
    if not math.isfinite(amount):
        raise InvalidBookingError(f"{field} must be a finite number")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidBookingError(f"{field} must be {'>= 0' if allow_zero else '> 0'}")
    return amount


class Mutation(ABC):
    """A two-phase change to the board.

    Each mutation should:
    1. Validate and apply its tentative transition in apply(), raising a
       BookingError before touching state if the change is not allowed
    2. Remember what it changed
    3. Write that to the store in persist()
    """

    def __init__(self, room_id: str, name: str | None = None):
        """Initialize the mutation.

        Args:
            room_id: Room the mutation targets
            name: Optional custom name. Defaults to class name.
        """
        self.room_id = room_id
        self.name = name or self.__class__.__name__
        self.logger = logger.bind(mutation=self.name, room_id=room_id)

    @abstractmethod
    def apply(self, state: BoardState, now: datetime, today: date) -> None:
        """Apply the tentative transition to local state.

        Args:
            state: Board state to change
            now: Current instant (aware)
            today: Current local calendar date
        """
        pass

    @abstractmethod
    async def persist(self, store: BookingStore) -> None:
        """Write the applied change to the store."""
        pass

    async def commit(self, store: BookingStore, state: BoardState) -> bool:
        """Persist with error handling and logging.

        Args:
            store: Authoritative store
            state: Board state, for recording errors

        Returns:
            True if the store accepted the change, False otherwise
        """
        self.logger.info("Persisting mutation", store=store.name)

        try:
            await self.persist(store)
            self.logger.info("Mutation committed")
            return True

        except Exception as e:
            self.logger.error(
                "Mutation persistence failed",
                error=str(e),
                exc_info=True,
            )
            state.add_error(self.name, str(e))
            return False
