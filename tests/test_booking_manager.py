"""Tests for the booking state manager."""

import asyncio

import pytest

from roomboard.models import RecordSource, Room, RoomStatus
from roomboard.services import (
    InvalidBookingError,
    RoomNotFoundError,
    RoomNotOccupiedError,
    RoomOccupiedError,
)
from roomboard.stores import LocalStore

from .conftest import NOW, TODAY


def assert_occupancy_invariant(manager):
    for room in manager.rooms:
        vacant = room.guest_name == "" and room.check_in_time is None
        assert (room.status == RoomStatus.AVAILABLE) == vacant, room.id


class FakeFeed:
    """Change feed that delivers a fixed list of rooms, then idles."""

    def __init__(self, rooms):
        self.rooms = rooms
        self.closed = False

    async def listen(self):
        for room in self.rooms:
            yield room
        await asyncio.Event().wait()

    async def close(self):
        self.closed = True


async def wait_for(condition, attempts: int = 100):
    for _ in range(attempts):
        if condition():
            return True
        await asyncio.sleep(0)
    return condition()


class TestStayLifecycle:
    """End-to-end check-in / check-out scenarios."""

    @pytest.mark.asyncio
    async def test_check_in_then_check_out(self, local_store, make_manager):
        """Test a stay moves from Active to History revenue without double counting."""
        async with make_manager(local_store) as manager:
            assert await manager.check_in("G01", "Asha", 500, "E1") is True

            room = manager.get_room("G01")
            assert room.status == RoomStatus.OCCUPIED
            assert room.guest_name == "Asha"
            assert room.price == 500
            assert room.check_in_time == NOW

            revenue = manager.revenue_source("local")
            report = await revenue.get_revenue(manager.today())
            assert report.total == 500
            assert [r.source for r in report.records] == [RecordSource.ACTIVE]

            assert await manager.check_out("G01") is True

            room = manager.get_room("G01")
            assert room.status == RoomStatus.AVAILABLE
            assert room.guest_name == "" and room.price == 0 and room.check_in_time is None
            assert len(manager.history) == 1
            assert manager.history[0].price == 500
            assert manager.history[0].entry_number == "E1"

            report = await revenue.get_revenue(manager.today())
            assert report.total == 500
            assert [r.source for r in report.records] == [RecordSource.HISTORY]
            assert_occupancy_invariant(manager)

    @pytest.mark.asyncio
    async def test_daily_payment_adds_ledger_entry_only(self, local_store, make_manager):
        """Test a payment leaves the room alone and shows up in the ledger report."""
        async with make_manager(local_store) as manager:
            await manager.check_in("G01", "Asha", 500, "E1")
            before = manager.get_room("G01")

            assert await manager.add_daily_payment("G01", 200) is True

            assert manager.get_room("G01") == before
            assert manager.history == []
            transactions = await local_store.list_transactions(TODAY)
            assert [t.amount for t in transactions] == [500, 200]

            report = await manager.revenue_source("ledger").get_revenue(TODAY)
            assert report.total == 700
            assert all(r.source == RecordSource.PAYMENT for r in report.records)

    @pytest.mark.asyncio
    async def test_history_newest_first_and_searchable(self, local_store, make_manager):
        async with make_manager(local_store) as manager:
            await manager.check_in("G01", "Asha", 500)
            await manager.check_in("101", "Ravi", 800)
            await manager.check_out("G01")
            await manager.check_out("101")

            assert [r.guest_name for r in manager.history] == ["Ravi", "Asha"]
            assert [r.guest_name for r in manager.search_history("asha")] == ["Asha"]
            assert [r.room_number for r in manager.search_history("10")] == ["101"]
            assert len(manager.search_history("")) == 2

    @pytest.mark.asyncio
    async def test_state_survives_restart(self, store_path, make_manager):
        async with make_manager(LocalStore(store_path)) as manager:
            await manager.check_in("205", "Kiran", "1200", "E9")

        async with make_manager(LocalStore(store_path)) as manager:
            room = manager.get_room("205")
            assert room.guest_name == "Kiran"
            assert room.price == 1200
            assert room.entry_number == "E9"


class TestRejections:
    """Tests for operations rejected before any state change."""

    @pytest.mark.asyncio
    async def test_check_out_available_room_rejected(self, flaky_store, make_manager):
        async with make_manager(flaky_store) as manager:
            with pytest.raises(RoomNotOccupiedError):
                await manager.check_out("G01")

            assert manager.history == []
            assert flaky_store.load_calls == 1

    @pytest.mark.asyncio
    async def test_check_in_occupied_room_rejected(self, local_store, make_manager):
        async with make_manager(local_store) as manager:
            await manager.check_in("G01", "Asha", 500)

            with pytest.raises(RoomOccupiedError):
                await manager.check_in("G01", "Ravi", 800)

            assert manager.get_room("G01").guest_name == "Asha"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "guest_name,price",
        [("", 500), ("   ", 500), ("Asha", -1), ("Asha", "abc"), ("Asha", None)],
    )
    async def test_invalid_check_in_rejected(self, local_store, make_manager, guest_name, price):
        async with make_manager(local_store) as manager:
            with pytest.raises(InvalidBookingError):
                await manager.check_in("G01", guest_name, price)

            assert manager.get_room("G01").status == RoomStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_free_stay_allowed(self, local_store, make_manager):
        """Test a zero price is a valid check-in."""
        async with make_manager(local_store) as manager:
            assert await manager.check_in("G01", "Guest of owner", 0)

    @pytest.mark.asyncio
    async def test_payment_rules(self, local_store, make_manager):
        async with make_manager(local_store) as manager:
            with pytest.raises(RoomNotOccupiedError):
                await manager.add_daily_payment("G01", 200)

            await manager.check_in("G01", "Asha", 500)
            with pytest.raises(InvalidBookingError):
                await manager.add_daily_payment("G01", 0)

    @pytest.mark.asyncio
    async def test_unknown_room(self, local_store, make_manager):
        async with make_manager(local_store) as manager:
            with pytest.raises(RoomNotFoundError):
                await manager.check_in("999", "Asha", 500)
            assert manager.get_room("999") is None

    @pytest.mark.asyncio
    async def test_not_started(self, local_store, make_manager):
        manager = make_manager(local_store)

        with pytest.raises(RuntimeError):
            await manager.check_in("G01", "Asha", 500)


class TestReconciliation:
    """Tests for refetch-on-failure and pushed changes."""

    @pytest.mark.asyncio
    async def test_failed_check_in_reloads_from_store(self, flaky_store, make_manager):
        """Test the optimistic check-in snaps back once persistence fails."""
        async with make_manager(flaky_store) as manager:
            flaky_store.fail_writes = True

            assert await manager.check_in("G01", "Asha", 500) is False

            assert manager.get_room("G01").status == RoomStatus.AVAILABLE
            assert flaky_store.load_calls == 2
            assert manager.state.has_errors()
            assert manager.state.errors[0]["operation"] == "CheckInMutation"
            assert_occupancy_invariant(manager)

    @pytest.mark.asyncio
    async def test_failed_ledger_write_leaves_no_half_check_in(self, flaky_store, make_manager):
        """Test the room is not stored occupied when its ledger entry cannot be written."""
        async with make_manager(flaky_store) as manager:
            flaky_store.fail_ledger = True

            assert await manager.check_in("G01", "Asha", 500, "E1") is False

            assert manager.get_room("G01").status == RoomStatus.AVAILABLE
            assert await flaky_store.list_transactions(TODAY) == []
            snapshot = await flaky_store.load()
            assert next(r for r in snapshot.rooms if r.id == "G01").status == RoomStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_failed_check_out_keeps_room_occupied(self, flaky_store, make_manager):
        async with make_manager(flaky_store) as manager:
            await manager.check_in("G01", "Asha", 500)
            flaky_store.fail_history = True

            assert await manager.check_out("G01") is False

            assert manager.get_room("G01").guest_name == "Asha"
            assert manager.history == []

    @pytest.mark.asyncio
    async def test_start_with_unreachable_store_uses_defaults(self, flaky_store, make_manager):
        flaky_store.fail_load = True

        async with make_manager(flaky_store) as manager:
            assert len(manager.rooms) == 20
            assert manager.state.errors[0]["operation"] == "reload"

            flaky_store.fail_load = False
            assert await manager.reload() is True

    @pytest.mark.asyncio
    async def test_remote_change_merged_by_id(self, local_store, make_manager, occupied_room):
        async with make_manager(local_store) as manager:
            manager.apply_remote_change(occupied_room)
            await manager.settle()

            assert manager.get_room("101").guest_name == "Ravi"
            assert len(manager.rooms) == 20

    @pytest.mark.asyncio
    async def test_remote_change_after_local_write_wins(self, local_store, make_manager):
        """Test a push arriving after an optimistic write overrides it."""
        async with make_manager(local_store) as manager:
            await manager.check_in("G01", "Asha", 500)

            manager.apply_remote_change(Room(id="G01", number="G01", floor="Ground Floor"))
            await manager.settle()

            assert manager.get_room("G01").status == RoomStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_remote_change_for_unknown_room_ignored(self, local_store, make_manager):
        async with make_manager(local_store) as manager:
            manager.apply_remote_change(Room(id="301", number="301", floor="2nd Floor"))
            await manager.settle()

            assert manager.get_room("301") is None

    @pytest.mark.asyncio
    async def test_feed_changes_reach_board(self, local_store, make_manager, occupied_room):
        feed = FakeFeed([occupied_room])
        manager = make_manager(local_store, feed=feed)

        async with manager:
            assert await wait_for(lambda: manager.get_room("101").guest_name == "Ravi")

        assert feed.closed
