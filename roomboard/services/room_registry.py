"""Fixed room layout and per-room lookup."""

from typing import Optional

from roomboard.models import Floor, Room, RoomStatus
from roomboard.services.errors import RoomNotFoundError

# (floor, id prefix, room count)
FLOOR_LAYOUT: list[tuple[Floor, str, int]] = [
    (Floor.GROUND, "G0", 4),
    (Floor.FIRST, "10", 8),
    (Floor.SECOND, "20", 8),
]

ROOM_COUNT = sum(count for _, _, count in FLOOR_LAYOUT)

# Saved room lists without this id predate the current layout
LAYOUT_SENTINEL_ID = "G01"


def generate_rooms() -> list[Room]:
    """Build the full set of rooms, all available, floor-then-number order.

    Returns:
        Freshly allocated rooms G01-G04, 101-108, 201-208
    """
    rooms = []
    for floor, prefix, count in FLOOR_LAYOUT:
        for i in range(1, count + 1):
            number = f"{prefix}{i}"
            rooms.append(Room(id=number, number=number, floor=floor))
    return rooms


def is_current_layout(rooms: list[Room]) -> bool:
    """Check that saved rooms match the generated layout.

    One-way migration guard: lists from older layouts are discarded by the
    caller and regenerated.
    """
    return len(rooms) == ROOM_COUNT and any(r.id == LAYOUT_SENTINEL_ID for r in rooms)


class RoomRegistry:
    """Current state of every room, keyed by id, in layout order."""

    def __init__(self, rooms: Optional[list[Room]] = None):
        self._rooms: dict[str, Room] = {}
        for room in rooms if rooms is not None else generate_rooms():
            self._rooms[room.id] = room

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self):
        return iter(self._rooms.values())

    def all(self) -> list[Room]:
        return list(self._rooms.values())

    def find(self, room_id: str) -> Optional[Room]:
        """Return the room or None; callers guard against stale ids."""
        return self._rooms.get(room_id)

    def get(self, room_id: str) -> Room:
        """Return the room with this id.

        Raises:
            RoomNotFoundError: If the id is not in the registry
        """
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(f"Room not found: {room_id}")
        return room

    def replace(self, room: Room) -> Optional[Room]:
        """Store a new version of a known room (last write wins).

        Unknown ids are ignored so the registry never grows.

        Returns:
            The previous version, or None if the id is unknown
        """
        previous = self._rooms.get(room.id)
        if previous is not None:
            self._rooms[room.id] = room
        return previous

    def by_floor(self) -> dict[Floor, list[Room]]:
        """Group rooms by floor, floors in layout order."""
        grouped: dict[Floor, list[Room]] = {floor: [] for floor, _, _ in FLOOR_LAYOUT}
        for room in self._rooms.values():
            grouped.setdefault(room.floor, []).append(room)
        return grouped

    def occupancy(self) -> dict[str, int]:
        """Count rooms per status."""
        counts = {status.value: 0 for status in RoomStatus}
        for room in self._rooms.values():
            counts[room.status.value] += 1
        return counts


def complete_layout(rooms: list[Room]) -> tuple[list[Room], list[Room]]:
    """Fit stored rooms onto the layout.

    Ids outside the layout are dropped and layout ids with no stored room
    get a fresh available room.

    Returns:
        (rooms, filled): the full board in layout order, and the defaults
        that were added and still need to be written back
    """
    stored = {room.id: room for room in rooms}
    completed: list[Room] = []
    filled: list[Room] = []
    for default in generate_rooms():
        room = stored.get(default.id)
        if room is None:
            room = default
            filled.append(default)
        completed.append(room)
    return completed, filled
