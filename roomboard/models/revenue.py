"""Pydantic models for the daily revenue report."""

from pydantic import BaseModel, ConfigDict, Field

from roomboard.models.room_status import RecordSource


class RevenueRecord(BaseModel):
    """One line of a revenue report."""

    source: RecordSource
    room_number: str = Field(alias="roomNumber")
    guest_name: str = Field(default="", alias="guestName")
    entry_number: str = Field(default="", alias="entryNumber")
    price: float = 0.0

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class RevenueReport(BaseModel):
    """Income for one calendar date. Derived on demand, never persisted."""

    total: float = 0.0
    records: list[RevenueRecord] = Field(default_factory=list)

    @property
    def total_count(self) -> int:
        """Get number of records in the report.

        Returns:
            Number of revenue records
        """
        return len(self.records)
