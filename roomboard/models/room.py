"""Pydantic model for a bookable room."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from roomboard.models.fields import as_amount, ensure_aware
from roomboard.models.room_status import Floor, RoomStatus


class Room(BaseModel):
    """A fixed unit of inventory with binary occupancy state.

    Field names are the remote column names; aliases are the keys used in
    the local JSON document. Nulls on the wire become "" / 0.
    """

    id: str = Field(description="Stable room identifier, e.g. 'G01', '101'")
    number: str = Field(description="Human-readable room number")
    floor: Floor
    status: RoomStatus = RoomStatus.AVAILABLE
    guest_name: str = Field(default="", alias="guestName")
    price: float = Field(default=0.0, description="Check-in rate, 0 when available")
    entry_number: str = Field(
        default="",
        alias="entryNumber",
        description="Optional free-text ledger reference",
    )
    check_in_time: Optional[datetime] = Field(None, alias="checkInTime")

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("guest_name", "entry_number", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        """Nullable text columns map to empty strings."""
        return "" if v is None else v

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> float:
        return as_amount(v)

    @field_validator("check_in_time")
    @classmethod
    def aware_check_in(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(v)

    @model_validator(mode="after")
    def check_occupancy_fields(self) -> "Room":
        """available <=> no guest and no check-in time."""
        vacant = self.guest_name == "" and self.check_in_time is None
        if (self.status == RoomStatus.AVAILABLE) != vacant:
            raise ValueError(
                f"Room {self.id} is {self.status.value} but guest fields say otherwise"
            )
        return self

    @property
    def is_occupied(self) -> bool:
        return self.status == RoomStatus.OCCUPIED

    def occupied_by(
        self,
        guest_name: str,
        price: float,
        entry_number: str,
        check_in_time: datetime,
    ) -> "Room":
        """Return a copy of this room checked in to the given guest."""
        return self.model_copy(
            update={
                "status": RoomStatus.OCCUPIED,
                "guest_name": guest_name,
                "price": price,
                "entry_number": entry_number,
                "check_in_time": ensure_aware(check_in_time),
            }
        )

    def vacated(self) -> "Room":
        """Return a copy of this room reset to the available defaults."""
        return self.model_copy(
            update={
                "status": RoomStatus.AVAILABLE,
                "guest_name": "",
                "price": 0.0,
                "entry_number": "",
                "check_in_time": None,
            }
        )
