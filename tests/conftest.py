from datetime import date, datetime, timedelta, timezone

import pytest

from roomboard.models import HistoryRecord, Room, Transaction
from roomboard.services import BookingStateManager
from roomboard.stores import LocalStore

# Guest house runs on IST
IST = timezone(timedelta(hours=5, minutes=30))

# 2024-03-10 11:30 IST
NOW = datetime(2024, 3, 10, 6, 0, tzinfo=timezone.utc)
TODAY = date(2024, 3, 10)


class FlakyStore(LocalStore):
    """Local store whose writes can be made to fail."""

    def __init__(self, path):
        super().__init__(path)
        self.fail_writes = False
        self.fail_history = False
        self.fail_load = False
        self.fail_ledger = False
        self.load_calls = 0

    async def load(self):
        self.load_calls += 1
        if self.fail_load:
            raise ConnectionError("backend unreachable")
        return await super().load()

    def _append_transaction(self, document, transaction):
        if self.fail_ledger:
            raise ConnectionError("ledger unavailable")
        return super()._append_transaction(document, transaction)

    async def save_room(self, room: Room) -> None:
        if self.fail_writes:
            raise ConnectionError("backend unreachable")
        await super().save_room(room)

    async def check_in(self, room: Room, transaction: Transaction) -> None:
        if self.fail_writes:
            raise ConnectionError("backend unreachable")
        await super().check_in(room, transaction)

    async def check_out(self, room: Room, record: HistoryRecord) -> None:
        if self.fail_writes or self.fail_history:
            raise ConnectionError("backend unreachable")
        await super().check_out(room, record)

    async def add_transaction(self, transaction: Transaction) -> None:
        if self.fail_writes:
            raise ConnectionError("backend unreachable")
        await super().add_transaction(transaction)


@pytest.fixture
def tz():
    return IST


@pytest.fixture
def clock():
    """Clock fixed at NOW."""
    return lambda: NOW


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "board.json"


@pytest.fixture
def local_store(store_path):
    return LocalStore(store_path)


@pytest.fixture
def flaky_store(store_path):
    return FlakyStore(store_path)


@pytest.fixture
def make_manager(tz, clock):
    """Build (not start) a manager over a given store."""

    def _make(store, feed=None):
        return BookingStateManager(store, feed=feed, tz=tz, clock=clock)

    return _make


@pytest.fixture
def occupied_room():
    return Room(
        id="101",
        number="101",
        floor="1st Floor",
        status="occupied",
        guest_name="Ravi",
        price=800,
        entry_number="E7",
        check_in_time=NOW,
    )


@pytest.fixture
def history_record():
    return HistoryRecord(
        id="h1",
        room_number="G02",
        guest_name="Meera",
        price=650,
        entry_number="E3",
        check_in_time=NOW - timedelta(hours=2),
        check_out_time=NOW,
    )
