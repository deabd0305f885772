"""Room occupancy status and floor enums."""

from enum import Enum


class RoomStatus(str, Enum):
    """Binary occupancy state of a room."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"


class Floor(str, Enum):
    """Floors of the guest house, in display order."""

    GROUND = "Ground Floor"
    FIRST = "1st Floor"
    SECOND = "2nd Floor"


class RecordSource(str, Enum):
    """Provenance tag of a revenue record.

    - Active: room currently occupied, check-in on the report date
    - History: checked-out stay, check-in on the report date
    - Payment: ledger transaction dated on the report date
    """

    ACTIVE = "Active"
    HISTORY = "History"
    PAYMENT = "Payment"
