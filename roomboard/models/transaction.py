"""Pydantic model for a ledger entry."""

import uuid
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from roomboard.models.fields import as_amount


class Transaction(BaseModel):
    """Append-only record of money collected against a room.

    payment_date is the local calendar date at write time, so revenue
    queries can filter on it by equality. The id is assigned by the client
    so a retried write cannot add the same entry twice.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    room_number: str = Field(alias="roomNumber")
    guest_name: str = Field(default="", alias="guestName")
    entry_number: str = Field(default="", alias="entryNumber")
    amount: float = 0.0
    payment_date: date = Field(alias="paymentDate")

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",  # remote rows may carry created_at
    )

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("guest_name", "entry_number", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        return as_amount(v)
