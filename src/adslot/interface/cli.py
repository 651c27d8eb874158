"""CLI commands for operating ad inventory (Studio)."""

import argparse
import json
import logging
import sys
from datetime import date, timedelta
from pathlib import Path

from pydantic import ValidationError

from ..config.runtime import get_settings
from ..domain.errors import AdSlotError
from ..domain.inventory import HousePromotion
from ..wiring import (
    build_admin_service,
    build_availability_service,
    build_booking_service,
    build_store,
)
from .sweeper import SweepScheduler

_DEFAULT_PROMOTIONS_PATH = Path("data") / "house_promotions.json"


def load_promotions_from_file(path: Path) -> list[HousePromotion]:
    """Load house promotions from a JSON list. Exits on missing file or invalid schema."""
    if not path.exists():
        print(f"Error: promotions file not found: {path}", file=sys.stderr)
        sys.exit(1)
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        print("Error: JSON file must contain a list of promotion objects.", file=sys.stderr)
        sys.exit(1)
    items: list[HousePromotion] = []
    for i, item in enumerate(raw):
        try:
            items.append(HousePromotion.model_validate(item))
        except ValidationError as e:
            print(f"Error: invalid promotion at index {i}: {e}", file=sys.stderr)
            sys.exit(1)
    return items


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Manage neighborhood ad inventory")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create the SQLite schema")

    avail_parser = subparsers.add_parser("availability", help="Show a month's calendar for a neighborhood")
    avail_parser.add_argument("neighborhood_id")
    avail_parser.add_argument("month", help="YYYY-MM")
    avail_parser.add_argument("--placement", choices=["daily", "weekly"], default="daily")

    for name, help_text in (("block", "Hold a slot out of sale"), ("unblock", "Release a held slot")):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("neighborhood_id")
        p.add_argument("date", type=date.fromisoformat, help="YYYY-MM-DD")
        p.add_argument("--placement", choices=["daily", "weekly"], default="daily")
        if name == "block":
            p.add_argument("--note", default=None)

    sweep_parser = subparsers.add_parser("sweep", help="Abandon stale unpaid orders")
    sweep_parser.add_argument("--older-than-minutes", type=int, default=None)
    sweep_parser.add_argument("--loop", action="store_true", help="Keep sweeping on the configured interval")

    confirm_parser = subparsers.add_parser("confirm", help="Confirm an order manually")
    confirm_parser.add_argument("order_id")
    confirm_parser.add_argument("--operator", required=True)

    tasks_parser = subparsers.add_parser("tasks", help="List the operator reconciliation queue")
    tasks_parser.add_argument("--all", action="store_true", help="Include resolved tasks")

    seed_parser = subparsers.add_parser("seed-promotions", help="Load house promotions from a JSON file")
    seed_parser.add_argument("--file", type=Path, default=_DEFAULT_PROMOTIONS_PATH)

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    settings = get_settings()

    try:
        if args.command == "init-db":
            build_store(settings)
            print(f"Initialized database at {settings.database_path}")
        elif args.command == "availability":
            view = build_availability_service(settings).get_availability(
                args.neighborhood_id, args.placement, args.month
            )
            out = view.model_dump(mode="json")
            out["bookable_dates"] = [d.isoformat() for d in view.bookable_dates()]
            print(json.dumps(out, indent=2))
        elif args.command == "block":
            slot = build_admin_service(settings).block_slot(args.neighborhood_id, args.date, args.placement, args.note)
            print(f"Blocked {slot.neighborhood_id} {slot.date.isoformat()} ({slot.placement_type.value})")
        elif args.command == "unblock":
            released = build_admin_service(settings).unblock_slot(args.neighborhood_id, args.date, args.placement)
            print("Unblocked." if released else "Slot was not blocked.")
        elif args.command == "sweep":
            older_than = timedelta(minutes=args.older_than_minutes) if args.older_than_minutes else None
            booking = build_booking_service(settings)
            if args.loop:
                scheduler = SweepScheduler(booking, settings.sweep_interval_seconds, older_than)
                print(f"Sweeping every {settings.sweep_interval_seconds}s (Ctrl-C to stop)")
                try:
                    scheduler.run_forever()
                except KeyboardInterrupt:
                    scheduler.stop()
            else:
                report = booking.expire_stale_orders(older_than)
                print(json.dumps(report.model_dump(mode="json"), indent=2))
        elif args.command == "confirm":
            confirmation = build_booking_service(settings).confirm_order_manually(args.order_id, args.operator)
            print(json.dumps(confirmation.model_dump(mode="json") | {"degraded": confirmation.degraded}, indent=2))
        elif args.command == "tasks":
            tasks = build_admin_service(settings).list_tasks(open_only=not args.all)
            print(json.dumps([t.model_dump(mode="json") for t in tasks], indent=2))
        elif args.command == "seed-promotions":
            admin = build_admin_service(settings)
            promotions = load_promotions_from_file(args.file)
            for promotion in promotions:
                admin.upsert_house_promotion(promotion)
            print(f"Loaded {len(promotions)} house promotions from {args.file}.")
        else:
            parser.print_help()
    except AdSlotError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
