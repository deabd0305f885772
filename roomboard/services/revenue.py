"""Daily revenue report.

Two interchangeable sources produce the same report shape:

- LocalRevenueSource merges the in-memory board: occupied rooms whose
  check-in falls on the date (tagged Active), then history records whose
  check-in falls on the date (tagged History).
- LedgerRevenueSource reads the append-only transactions ledger filtered by
  payment date (every record tagged Payment). Payment dates are fixed in
  local time when written, so no timezone handling is needed at read time.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone, tzinfo
from typing import Optional

from pydantic import TypeAdapter
from structlog import get_logger

from roomboard.models import (
    HistoryRecord,
    RecordSource,
    RevenueRecord,
    RevenueReport,
    Room,
    RoomStatus,
)
from roomboard.models.fields import as_amount
from roomboard.services.board_state import BoardState
from roomboard.stores.base import BookingStore

logger = get_logger(__name__)

_timestamp_adapter = TypeAdapter(datetime)


def to_report_date(value: date | str) -> date:
    """Accept a date or an ISO YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def local_date_string(timestamp: datetime | str | None, tz: Optional[tzinfo] = None) -> Optional[str]:
    """Calendar date of a timestamp in local time, as YYYY-MM-DD.

    Truncating the UTC form would file a check-in shortly before local
    midnight under the next day (west of UTC) or the previous day (east of
    UTC), so the instant is converted to the local zone first.

    Args:
        timestamp: Aware datetime, naive datetime (taken as UTC) or ISO string
        tz: Local zone; None uses the system local zone

    Returns:
        Date string, or None if there is no timestamp
    """
    if timestamp is None:
        return None
    if isinstance(timestamp, str):
        timestamp = _timestamp_adapter.validate_python(timestamp)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(tz).date().isoformat()


def compute_revenue(
    report_date: date | str,
    rooms: list[Room],
    history: list[HistoryRecord],
    tz: Optional[tzinfo] = None,
) -> RevenueReport:
    """Income for one date from live occupancy plus completed stays.

    Active records come first, then History records, each in input order.
    A stay is either still occupied or already in history, never both, so
    the two streams are concatenated without deduplication.

    Args:
        report_date: Local calendar date to report on
        rooms: Current rooms
        history: Completed stays
        tz: Local zone; None uses the system local zone

    Returns:
        RevenueReport with the matching records and their total
    """
    target = to_report_date(report_date).isoformat()

    records = [
        RevenueRecord(
            source=RecordSource.ACTIVE,
            room_number=room.number,
            guest_name=room.guest_name,
            entry_number=room.entry_number,
            price=as_amount(room.price),
        )
        for room in rooms
        if room.status == RoomStatus.OCCUPIED
        and local_date_string(room.check_in_time, tz) == target
    ]
    records.extend(
        RevenueRecord(
            source=RecordSource.HISTORY,
            room_number=record.room_number,
            guest_name=record.guest_name,
            entry_number=record.entry_number,
            price=as_amount(record.price),
        )
        for record in history
        if local_date_string(record.check_in_time, tz) == target
    )

    return RevenueReport(total=sum(r.price for r in records), records=records)


class RevenueSource(ABC):
    """Produces the revenue report for a calendar date."""

    @abstractmethod
    async def get_revenue(self, report_date: date | str) -> RevenueReport:
        """Build the report for one date."""
        pass


class LocalRevenueSource(RevenueSource):
    """Two-source merge over the board held in memory."""

    def __init__(self, state: BoardState, tz: Optional[tzinfo] = None):
        self.state = state
        self.tz = tz

    async def get_revenue(self, report_date: date | str) -> RevenueReport:
        report = compute_revenue(
            report_date,
            self.state.registry.all(),
            self.state.history,
            self.tz,
        )
        logger.info(
            "Computed revenue from board",
            report_date=str(report_date),
            total=report.total,
            record_count=report.total_count,
        )
        return report


class LedgerRevenueSource(RevenueSource):
    """Single ledger query by exact payment date."""

    def __init__(self, store: BookingStore):
        self.store = store

    async def get_revenue(self, report_date: date | str) -> RevenueReport:
        payment_date = to_report_date(report_date)
        transactions = await self.store.list_transactions(payment_date)
        records = [
            RevenueRecord(
                source=RecordSource.PAYMENT,
                room_number=t.room_number,
                guest_name=t.guest_name,
                entry_number=t.entry_number,
                price=as_amount(t.amount),
            )
            for t in transactions
        ]
        report = RevenueReport(total=sum(r.price for r in records), records=records)
        logger.info(
            "Computed revenue from ledger",
            report_date=payment_date.isoformat(),
            total=report.total,
            record_count=report.total_count,
        )
        return report
