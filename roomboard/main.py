"""Command line entry point for the room booking board."""

import argparse
import asyncio
import json
import sys
from typing import Any, Optional

from roomboard.clients import RoomChangeFeed
from roomboard.config import configure_logging, get_logger, settings
from roomboard.services import BookingError, BookingStateManager
from roomboard.stores import BookingStore, LocalStore, RemoteStore

logger = get_logger(__name__)


def build_booking_manager() -> BookingStateManager:
    """Create the manager for the configured backend.

    STORE_BACKEND=remote uses the hosted backend (and the Redis change feed
    when REALTIME_ENABLED is set); anything else uses the local document.
    """
    feed: Optional[RoomChangeFeed] = None
    store: BookingStore
    if settings.store_backend == "remote":
        if settings.realtime_enabled:
            feed = RoomChangeFeed()
        store = RemoteStore(feed=feed)
    else:
        store = LocalStore()
    return BookingStateManager(store, feed=feed)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="roomboard", description="Guest-house room booking board")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Overrides LOG_LEVEL",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("rooms", help="List rooms by floor")

    check_in = commands.add_parser("check-in", help="Check a guest in")
    check_in.add_argument("room_id")
    check_in.add_argument("guest_name")
    check_in.add_argument("price")
    check_in.add_argument("--entry", default="", help="Ledger entry / serial number")

    check_out = commands.add_parser("check-out", help="Check a room out")
    check_out.add_argument("room_id")

    pay = commands.add_parser("pay", help="Record a daily payment")
    pay.add_argument("room_id")
    pay.add_argument("amount")

    revenue = commands.add_parser("revenue", help="Daily revenue report")
    revenue.add_argument("--date", default=None, help="YYYY-MM-DD, defaults to today")
    revenue.add_argument("--source", choices=["ledger", "local"], default=None)

    history = commands.add_parser("history", help="Completed stays, newest first")
    history.add_argument("--search", default="", help="Guest name or room number")

    return parser


async def run_command(manager: BookingStateManager, args: argparse.Namespace) -> dict[str, Any]:
    """Execute one command against a started manager.

    Returns:
        JSON-serializable result
    """
    if args.command == "rooms":
        return {
            "floors": {
                floor.value: [room.model_dump(mode="json") for room in rooms]
                for floor, rooms in manager.state.registry.by_floor().items()
            },
            "summary": manager.state.get_summary(),
        }
    if args.command == "check-in":
        committed = await manager.check_in(args.room_id, args.guest_name, args.price, args.entry)
        return {"success": committed, "room": _room_json(manager, args.room_id)}
    if args.command == "check-out":
        committed = await manager.check_out(args.room_id)
        return {"success": committed, "room": _room_json(manager, args.room_id)}
    if args.command == "pay":
        committed = await manager.add_daily_payment(args.room_id, args.amount)
        return {"success": committed}
    if args.command == "revenue":
        report_date = args.date or manager.today().isoformat()
        report = await manager.revenue_source(args.source).get_revenue(report_date)
        return {"success": True, "date": report_date, **report.model_dump(mode="json")}
    if args.command == "history":
        records = manager.search_history(args.search)
        return {"success": True, "history": [r.model_dump(mode="json") for r in records]}
    raise ValueError(f"Unknown command: {args.command}")


def _room_json(manager: BookingStateManager, room_id: str) -> Optional[dict[str, Any]]:
    room = manager.get_room(room_id)
    return room.model_dump(mode="json") if room else None


async def main(argv: Optional[list[str]] = None) -> int:
    """Main async function: start the board, run one command, stop.

    Returns:
        Exit code
    """
    args = build_parser().parse_args(argv)
    logger.info(
        "Starting room board",
        environment=settings.environment,
        store_backend=settings.store_backend,
        command=args.command,
    )

    if settings.store_backend == "remote":
        missing = settings.validate_remote()
        if missing:
            logger.error("Remote backend config incomplete", missing=missing)
            print(json.dumps({"success": False, "error": f"Missing: {', '.join(missing)}"}))
            return 1

    manager = build_booking_manager()
    try:
        async with manager:
            result = await run_command(manager, args)
    except BookingError as e:
        logger.warning("Booking rejected", command=args.command, error=str(e))
        print(json.dumps({"success": False, "error": str(e)}))
        return 1
    except Exception as e:
        logger.error(
            "Fatal error in main application",
            error=str(e),
            exc_info=True,
        )
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 0 if result.get("success", True) else 1


def run_sync(argv: Optional[list[str]] = None) -> int:
    """Run the async main function synchronously.

    Returns:
        Exit code from main()
    """
    return asyncio.run(main(argv))


def cli(argv: Optional[list[str]] = None) -> int:
    """Console script: configure logging and run."""
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level)
    return run_sync(argv)


if __name__ == "__main__":
    sys.exit(cli())
