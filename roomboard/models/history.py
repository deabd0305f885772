"""Pydantic model for a completed stay."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from roomboard.models.fields import as_amount, ensure_aware


class HistoryRecord(BaseModel):
    """Immutable record of a stay, created once when a room is checked out."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    room_number: str = Field(alias="roomNumber")
    guest_name: str = Field(alias="guestName")
    price: float = 0.0
    entry_number: str = Field(default="", alias="entryNumber")
    check_in_time: datetime = Field(alias="checkInTime")
    check_out_time: datetime = Field(alias="checkOutTime")

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        """Older local documents used millisecond timestamps as ids."""
        return str(v) if isinstance(v, int) else v

    @field_validator("guest_name", "entry_number", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> float:
        return as_amount(v)

    @field_validator("check_in_time", "check_out_time")
    @classmethod
    def aware_times(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @model_validator(mode="after")
    def check_stay_order(self) -> "HistoryRecord":
        if self.check_out_time < self.check_in_time:
            raise ValueError("check_out_time is before check_in_time")
        return self
