"""Room board data models."""

from roomboard.models.history import HistoryRecord
from roomboard.models.revenue import RevenueRecord, RevenueReport
from roomboard.models.room import Room
from roomboard.models.room_status import Floor, RecordSource, RoomStatus
from roomboard.models.snapshot import BoardSnapshot
from roomboard.models.transaction import Transaction

__all__ = [
    "Room",
    "RoomStatus",
    "Floor",
    "HistoryRecord",
    "Transaction",
    "RecordSource",
    "RevenueRecord",
    "RevenueReport",
    "BoardSnapshot",
]
