"""Business services package."""

from roomboard.services.board_state import BoardState
from roomboard.services.booking_manager import BookingStateManager
from roomboard.services.errors import (
    BookingError,
    InvalidBookingError,
    RoomNotFoundError,
    RoomNotOccupiedError,
    RoomOccupiedError,
)
from roomboard.services.history_search import search_history
from roomboard.services.revenue import (
    LedgerRevenueSource,
    LocalRevenueSource,
    RevenueSource,
    compute_revenue,
    local_date_string,
)
from roomboard.services.room_registry import RoomRegistry, generate_rooms

__all__ = [
    "BoardState",
    "BookingStateManager",
    "BookingError",
    "InvalidBookingError",
    "RoomNotFoundError",
    "RoomNotOccupiedError",
    "RoomOccupiedError",
    "search_history",
    "RevenueSource",
    "LocalRevenueSource",
    "LedgerRevenueSource",
    "compute_revenue",
    "local_date_string",
    "RoomRegistry",
    "generate_rooms",
]
