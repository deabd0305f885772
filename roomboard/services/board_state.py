"""In-memory board state owned by the booking manager."""

from datetime import datetime, timezone
from typing import Any, Optional

from roomboard.models import BoardSnapshot, HistoryRecord
from roomboard.services.room_registry import RoomRegistry


class BoardState:
    """Rooms, history and the errors seen while keeping them in sync.

    The object is long-lived: replace() swaps its contents in place so
    anything holding a reference (revenue sources, pending commits) keeps
    seeing the current board.
    """

    def __init__(self, snapshot: Optional[BoardSnapshot] = None):
        """Initialize board state.

        Args:
            snapshot: Initial contents; defaults to a freshly generated board
        """
        self.registry = RoomRegistry(snapshot.rooms if snapshot else None)
        self.history: list[HistoryRecord] = list(snapshot.history) if snapshot else []
        self.last_synced: datetime | None = None

        # Errors encountered while persisting or reloading
        self.errors: list[dict[str, str]] = []

    def replace(self, snapshot: BoardSnapshot) -> None:
        """Overwrite local state wholesale with an authoritative snapshot."""
        self.registry = RoomRegistry(snapshot.rooms)
        self.history = list(snapshot.history)
        self.last_synced = datetime.now(timezone.utc)

    def add_error(self, operation: str, error_message: str) -> None:
        """Add an error to the state.

        Args:
            operation: Name of the operation where the error occurred
            error_message: Error message
        """
        self.errors.append({
            "operation": operation,
            "message": error_message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def get_summary(self) -> dict[str, Any]:
        """Get a summary of the board.

        Returns:
            Dictionary with occupancy counts, history size, sync time and errors
        """
        return {
            "rooms": len(self.registry),
            "occupancy": self.registry.occupancy(),
            "history_records": len(self.history),
            "last_synced": self.last_synced.isoformat() if self.last_synced else None,
            "errors": self.errors,
        }
