"""Tests for the remote store over a mocked backend client."""

from unittest.mock import AsyncMock

import pytest

from roomboard.models import RoomStatus, Transaction
from roomboard.services.room_registry import generate_rooms
from roomboard.stores import RemoteStore
from roomboard.transformers import RowTransformer

from .conftest import TODAY


@pytest.fixture
def mock_client():
    client = AsyncMock()
    client.get_rooms = AsyncMock(return_value=[])
    client.get_history = AsyncMock(return_value=[])
    client.upsert_rooms = AsyncMock(return_value=[])
    client.check_in_room = AsyncMock(return_value=None)
    client.check_out_room = AsyncMock(return_value=None)
    client.insert_transaction = AsyncMock(return_value=[])
    client.get_transactions = AsyncMock(return_value=[])
    return client


@pytest.fixture
def mock_feed():
    feed = AsyncMock()
    feed.publish = AsyncMock()
    return feed


class TestRemoteStore:
    """Tests for RemoteStore."""

    @pytest.mark.asyncio
    async def test_empty_backend_is_seeded(self, mock_client):
        """Test the default layout is written when the rooms table is empty."""
        store = RemoteStore(client=mock_client)

        snapshot = await store.load()

        assert [r.id for r in snapshot.rooms] == [r.id for r in generate_rooms()]
        [rows] = mock_client.upsert_rooms.call_args.args
        assert len(rows) == 20
        assert rows[0]["id"] == "G01"

    @pytest.mark.asyncio
    async def test_rooms_returned_in_layout_order(self, mock_client, history_record):
        rows = [RowTransformer.room_to_row(r) for r in generate_rooms()]
        mock_client.get_rooms.return_value = sorted(rows, key=lambda row: row["id"])
        mock_client.get_history.return_value = [RowTransformer.history_to_row(history_record)]
        store = RemoteStore(client=mock_client)

        snapshot = await store.load()

        assert snapshot.rooms == generate_rooms()
        assert snapshot.history == [history_record]
        mock_client.upsert_rooms.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partial_rooms_completed_and_seeded(self, mock_client, occupied_room):
        """Test missing and unreadable rows are replaced so the board keeps all rooms."""
        rows = [RowTransformer.room_to_row(r) for r in generate_rooms()]
        rows = [row for row in rows if row["id"] != "208"]
        rows[0] = {**rows[0], "status": "occupied"}  # G01 occupied with no guest
        rows[4] = RowTransformer.room_to_row(occupied_room)
        rows.append({"id": "301", "number": "301", "floor": "2nd Floor", "status": "available"})
        mock_client.get_rooms.return_value = rows
        store = RemoteStore(client=mock_client)

        snapshot = await store.load()

        assert [r.id for r in snapshot.rooms] == [r.id for r in generate_rooms()]
        assert snapshot.rooms[0].status == RoomStatus.AVAILABLE
        assert snapshot.rooms[4] == occupied_room
        [seeded] = mock_client.upsert_rooms.call_args.args
        assert sorted(row["id"] for row in seeded) == ["208", "G01"]

    @pytest.mark.asyncio
    async def test_check_in_single_call(self, mock_client, mock_feed, occupied_room):
        """Test the room and its ledger entry go out as one request."""
        store = RemoteStore(client=mock_client, feed=mock_feed)
        transaction = Transaction(room_number="101", guest_name="Ravi", amount=800, payment_date=TODAY)

        await store.check_in(occupied_room, transaction)

        mock_client.check_in_room.assert_awaited_once_with(
            RowTransformer.room_to_row(occupied_room),
            RowTransformer.transaction_to_row(transaction),
        )
        mock_client.upsert_rooms.assert_not_awaited()
        mock_client.insert_transaction.assert_not_awaited()
        mock_feed.publish.assert_awaited_once_with(occupied_room)

    @pytest.mark.asyncio
    async def test_save_room_announced(self, mock_client, mock_feed, occupied_room):
        store = RemoteStore(client=mock_client, feed=mock_feed)

        await store.save_room(occupied_room)

        mock_client.upsert_rooms.assert_awaited_once_with([RowTransformer.room_to_row(occupied_room)])
        mock_feed.publish.assert_awaited_once_with(occupied_room)

    @pytest.mark.asyncio
    async def test_check_out_single_call(self, mock_client, mock_feed, occupied_room, history_record):
        """Test room reset and history insert go out as one request."""
        store = RemoteStore(client=mock_client, feed=mock_feed)
        vacated = occupied_room.vacated()

        await store.check_out(vacated, history_record)

        mock_client.check_out_room.assert_awaited_once_with(
            "101", RowTransformer.history_to_row(history_record)
        )
        mock_client.upsert_rooms.assert_not_awaited()
        mock_feed.publish.assert_awaited_once_with(vacated)

    @pytest.mark.asyncio
    async def test_failed_write_not_announced(self, mock_client, mock_feed, occupied_room):
        mock_client.upsert_rooms.side_effect = ConnectionError("backend unreachable")
        store = RemoteStore(client=mock_client, feed=mock_feed)

        with pytest.raises(ConnectionError):
            await store.save_room(occupied_room)

        mock_feed.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transactions(self, mock_client):
        transaction = Transaction(room_number="G01", guest_name="Asha", amount=200, payment_date=TODAY)
        mock_client.get_transactions.return_value = [RowTransformer.transaction_to_row(transaction)]
        store = RemoteStore(client=mock_client)

        await store.add_transaction(transaction)
        result = await store.list_transactions(TODAY)

        mock_client.insert_transaction.assert_awaited_once_with(
            RowTransformer.transaction_to_row(transaction)
        )
        mock_client.get_transactions.assert_awaited_once_with(TODAY)
        assert result == [transaction]

    @pytest.mark.asyncio
    async def test_board_over_partial_backend_has_every_room(self, mock_client, make_manager):
        rows = [RowTransformer.room_to_row(r) for r in generate_rooms()[1:-1]]
        mock_client.get_rooms.return_value = rows

        async with make_manager(RemoteStore(client=mock_client)) as manager:
            assert len(manager.rooms) == 20
            assert manager.get_room("G01") is not None
            assert manager.get_room("208") is not None
