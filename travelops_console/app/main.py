from __future__ import annotations

import argparse
import asyncio
import sys

from travelops_console.app.application.presets import (
    PRESETS,
    build_controller,
    build_http_client,
    build_kanban,
    get_preset,
)
from travelops_console.app.config import AppConfig
from travelops_console.app.export.csv_exporter import export_current_view
from travelops_console.app.shared_store import SIDEBAR_EXPANDED, SharedStore
from travelops_console.app.ui.components.notification_center import NotificationCenter
from travelops_console.app.ui.pagination import page_numbers
from travelops_console.app.ui.table_printer import print_notification, print_pager, print_table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="travelops", description="Travel agency operations console")
    parser.add_argument("--env-file", default=".env")
    commands = parser.add_subparsers(dest="command", required=True)

    listing = commands.add_parser("list", help="search, sort and page through a collection")
    listing.add_argument("collection", choices=sorted(PRESETS))
    listing.add_argument("--search", default="")
    listing.add_argument("--sort", default=None)
    listing.add_argument("--order", choices=["asc", "desc"], default=None)
    listing.add_argument("--page", type=int, default=1)
    listing.add_argument("--export", metavar="DIR", default=None, help="write the filtered rows to CSV")

    board = commands.add_parser("kanban", help="show status columns")
    board.add_argument("collection", choices=sorted(name for name, preset in PRESETS.items() if preset.kanban_columns))
    board.add_argument("--search", default="")

    move = commands.add_parser("move", help="move a kanban card to another column")
    move.add_argument("collection", choices=sorted(name for name, preset in PRESETS.items() if preset.kanban_columns))
    move.add_argument("record_id")
    move.add_argument("--from", dest="from_group", required=True)
    move.add_argument("--to", dest="to_group", required=True)
    move.add_argument("--index", type=int, default=0)

    sidebar = commands.add_parser("sidebar", help="show or toggle the shared sidebar state")
    sidebar.add_argument("action", choices=["show", "toggle"])
    return parser


async def run_list(args: argparse.Namespace, config: AppConfig, notifications: NotificationCenter) -> int:
    preset = get_preset(args.collection)
    http_client = build_http_client(config)
    async with http_client:
        controller = build_controller(preset, http_client, config, notifications)
        if not await controller.load():
            return 1
    if args.sort:
        controller.set_sort_key(args.sort)
    if args.order:
        controller.set_sort_order(args.order)
    controller.set_search_text(args.search)
    view = controller.set_page(args.page)

    print_table(f"-- {preset.name} ({view.total_count}) --", list(view.visible_rows), list(preset.columns))
    print_pager(view.page, view.total_pages, page_numbers(view.page, view.total_pages))
    if args.export:
        path = export_current_view(
            module=preset.name,
            rows=controller.ordered_rows(),
            columns=preset.columns,
            output_dir=args.export,
            query=controller.query,
        )
        print(f"[export] {path}")
    return 0


async def run_kanban(args: argparse.Namespace, config: AppConfig, notifications: NotificationCenter) -> int:
    preset = get_preset(args.collection)
    http_client = build_http_client(config)
    async with http_client:
        controller = build_controller(preset, http_client, config, notifications)
        if not await controller.load():
            return 1
        board = build_kanban(preset, controller)
        if args.command == "move":
            # ids arrive as text; the API may use numbers
            record_id = next(
                (record["id"] for record in controller.records if str(record["id"]) == args.record_id),
                args.record_id,
            )
            try:
                await board.move_record(record_id, args.from_group, args.to_group, args.index)
            except ValueError as error:
                print(f"[move] {error}", file=sys.stderr)
                return 2
        controller.set_search_text(getattr(args, "search", ""))
        for column in board.column_defs:
            cards = board.columns()[column.id]
            print_table(f"-- {column.title} ({len(cards)}) --", cards, list(preset.columns))
    return 1 if notifications.errors() else 0


def run_sidebar(args: argparse.Namespace, config: AppConfig) -> int:
    store = SharedStore(path=config.store_path)
    if args.action == "toggle":
        store.toggle(SIDEBAR_EXPANDED)
    state = "expanded" if store.get(SIDEBAR_EXPANDED) else "collapsed"
    print(f"sidebar: {state}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = AppConfig.from_env(args.env_file)
    except ValueError as error:
        print(f"[config] {error}", file=sys.stderr)
        return 2

    if args.command == "sidebar":
        return run_sidebar(args, config)

    notifications = NotificationCenter()
    notifications.subscribe(print_notification)
    if args.command == "list":
        return asyncio.run(run_list(args, config, notifications))
    return asyncio.run(run_kanban(args, config, notifications))


if __name__ == "__main__":
    raise SystemExit(main())
