"""Full board state as read from a store."""

from pydantic import BaseModel, Field

from roomboard.models.history import HistoryRecord
from roomboard.models.room import Room


class BoardSnapshot(BaseModel):
    """Rooms in registry order and history newest-first."""

    rooms: list[Room] = Field(default_factory=list)
    history: list[HistoryRecord] = Field(default_factory=list)
