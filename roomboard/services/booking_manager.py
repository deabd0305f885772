"""Booking state manager: optimistic mutations reconciled against a store."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Optional

from structlog import get_logger

from roomboard.clients.change_feed import RoomChangeFeed
from roomboard.config import settings
from roomboard.models import HistoryRecord, Room
from roomboard.services.board_state import BoardState
from roomboard.services.history_search import search_history
from roomboard.services.mutations import (
    AddPaymentMutation,
    CheckInMutation,
    CheckOutMutation,
    Mutation,
)
from roomboard.services.revenue import (
    LedgerRevenueSource,
    LocalRevenueSource,
    RevenueSource,
)
from roomboard.stores.base import BookingStore

logger = get_logger(__name__)


@dataclass
class _Command:
    mutation: Mutation
    done: asyncio.Future


@dataclass
class _RemoteChange:
    room: Room


@dataclass
class _Reload:
    reason: str
    done: Optional[asyncio.Future] = field(default=None)


class BookingStateManager:
    """Owns the board and keeps it consistent with the store.

    Local commands, reload requests and pushed room changes all go through
    one mailbox consumed by a single task, which is the only writer of the
    board state. A command is applied to local state immediately, then
    persisted in its own task; when persistence fails the whole board is
    re-read from the store instead of undoing the change field by field.
    Pushed changes are merged by room id as they arrive, so they may land
    before or after an outstanding write for the same room (last write wins).
    """

    def __init__(
        self,
        store: BookingStore,
        feed: Optional[RoomChangeFeed] = None,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the manager.

        Args:
            store: Authoritative store
            feed: Optional push channel of remote room changes
            tz: Local zone for "today"; defaults to the configured zone
            clock: Returns the current aware instant; defaults to UTC now
        """
        self.store = store
        self.feed = feed
        self.tz = tz if tz is not None else settings.local_tz
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.state = BoardState()
        self.logger = logger.bind(store=store.name)

        self._mailbox: asyncio.Queue = asyncio.Queue()
        self._consumer: Optional[asyncio.Task] = None
        self._listener: Optional[asyncio.Task] = None
        self._commits: set[asyncio.Task] = set()

    async def __aenter__(self) -> "BookingStateManager":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    @property
    def running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    async def start(self) -> None:
        """Load the board and start consuming the mailbox."""
        if self.running:
            return
        if not await self._refresh("startup"):
            self.logger.warning("Starting with the default board")
        self._consumer = asyncio.create_task(self._consume(), name="board-mailbox")
        if self.feed is not None:
            self._listener = asyncio.create_task(self._listen(), name="board-change-feed")
        self.logger.info(
            "Booking manager started",
            realtime=self.feed is not None,
            occupancy=self.state.registry.occupancy(),
        )

    async def stop(self) -> None:
        """Cancel background tasks and close the store and feed."""
        tasks = [t for t in (self._listener, self._consumer, *self._commits) if t is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._listener = None
        self._consumer = None
        self._commits.clear()

        await self.store.close()
        if self.feed is not None:
            await self.feed.close()
        self.logger.info("Booking manager stopped")

    # Mutators

    async def check_in(
        self,
        room_id: str,
        guest_name: str,
        price: Any,
        entry_number: str = "",
    ) -> bool:
        """Check a guest in.

        Returns:
            True if persisted, False if the board was reloaded after a failure

        Raises:
            RoomNotFoundError, RoomOccupiedError, InvalidBookingError
        """
        return await self._submit(CheckInMutation(room_id, guest_name, price, entry_number))

    async def check_out(self, room_id: str) -> bool:
        """Check a room out, moving the stay to history.

        Raises:
            RoomNotFoundError, RoomNotOccupiedError
        """
        return await self._submit(CheckOutMutation(room_id))

    async def add_daily_payment(self, room_id: str, amount: Any) -> bool:
        """Record a payment against an occupied room.

        Raises:
            RoomNotFoundError, RoomNotOccupiedError, InvalidBookingError
        """
        return await self._submit(AddPaymentMutation(room_id, amount))

    async def reload(self) -> bool:
        """Replace the board with a fresh read of the store."""
        if not self.running:
            return await self._refresh("manual")
        done = asyncio.get_running_loop().create_future()
        await self._mailbox.put(_Reload("manual", done))
        return await done

    def apply_remote_change(self, room: Room) -> None:
        """Queue a room change received from another board."""
        self._mailbox.put_nowait(_RemoteChange(room))

    async def settle(self) -> None:
        """Wait until queued messages and outstanding writes are processed."""
        while True:
            await self._mailbox.join()
            pending = [t for t in self._commits if not t.done()]
            if not pending:
                if self._mailbox.empty():
                    return
                continue
            await asyncio.gather(*pending, return_exceptions=True)

    # Reads

    @property
    def rooms(self) -> list[Room]:
        return self.state.registry.all()

    @property
    def history(self) -> list[HistoryRecord]:
        return list(self.state.history)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.state.registry.find(room_id)

    def search_history(self, term: str = "") -> list[HistoryRecord]:
        return search_history(self.state.history, term)

    def today(self) -> date:
        """Current calendar date in the local zone."""
        return self._clock().astimezone(self.tz).date()

    def revenue_source(self, kind: Optional[str] = None) -> RevenueSource:
        """Revenue source for this board.

        Args:
            kind: "ledger" or "local"; defaults to the configured source
        """
        kind = kind or settings.revenue_source
        if kind == "local":
            return LocalRevenueSource(self.state, self.tz)
        return LedgerRevenueSource(self.store)

    # Mailbox

    async def _submit(self, mutation: Mutation) -> bool:
        if not self.running:
            raise RuntimeError("BookingStateManager is not started")
        done = asyncio.get_running_loop().create_future()
        await self._mailbox.put(_Command(mutation, done))
        return await done

    async def _consume(self) -> None:
        while True:
            message = await self._mailbox.get()
            try:
                await self._handle(message)
            except Exception as e:
                self.logger.error(
                    "Failed to handle board message",
                    message_type=type(message).__name__,
                    error=str(e),
                    exc_info=True,
                )
            finally:
                self._mailbox.task_done()

    async def _handle(self, message: Any) -> None:
        if isinstance(message, _Command):
            self._apply(message)
        elif isinstance(message, _RemoteChange):
            self._merge(message.room)
        elif isinstance(message, _Reload):
            ok = await self._refresh(message.reason)
            if message.done is not None and not message.done.done():
                message.done.set_result(ok)

    def _apply(self, command: _Command) -> None:
        mutation = command.mutation
        try:
            mutation.apply(self.state, self._clock(), self.today())
        except Exception as e:
            # Rejected before any state change
            mutation.logger.warning("Mutation rejected", error=str(e))
            if not command.done.done():
                command.done.set_exception(e)
            return

        task = asyncio.create_task(self._commit(command), name=f"commit-{mutation.name}")
        self._commits.add(task)
        task.add_done_callback(self._commits.discard)

    async def _commit(self, command: _Command) -> None:
        mutation = command.mutation
        committed = await mutation.commit(self.store, self.state)
        if not committed:
            reloaded = asyncio.get_running_loop().create_future()
            await self._mailbox.put(_Reload(f"{mutation.name} failed", reloaded))
            await reloaded
        if not command.done.done():
            command.done.set_result(committed)

    def _merge(self, room: Room) -> None:
        previous = self.state.registry.replace(room)
        if previous is None:
            self.logger.warning("Ignoring change for unknown room", room_id=room.id)
            return
        self.logger.debug(
            "Merged remote room change",
            room_id=room.id,
            status=room.status.value,
            previous_status=previous.status.value,
        )

    async def _refresh(self, reason: str) -> bool:
        try:
            snapshot = await self.store.load()
        except Exception as e:
            self.logger.error(
                "Failed to reload board from store",
                reason=reason,
                error=str(e),
                exc_info=True,
            )
            self.state.add_error("reload", str(e))
            return False

        self.state.replace(snapshot)
        self.logger.info(
            "Board reloaded from store",
            reason=reason,
            room_count=len(snapshot.rooms),
            history_count=len(snapshot.history),
        )
        return True

    async def _listen(self) -> None:
        try:
            async for room in self.feed.listen():
                await self._mailbox.put(_RemoteChange(room))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error("Room change feed stopped", error=str(e), exc_info=True)
            self.state.add_error("change_feed", str(e))
