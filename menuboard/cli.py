"""CLI entry point for the menu dashboard."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date

from dotenv import load_dotenv

from . import daterange
from .backend.client import MenuServiceClient
from .backend.credentials import create_credential_provider
from .config import load_config
from .controller import MenuListController, ViewStatus, create_controller
from .errors import AuthenticationError, MenuboardError
from .mapper import map_menu
from .models import AggregateType, Menu, MenuForm, RoleSlot, UploadFile


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="menuboard",
        description="Digital menu dashboard: upload, list and manage menu files",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to the configuration file (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # list
    list_parser = sub.add_parser("list", help="List menus")
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--search", type=str, default="")
    list_parser.add_argument(
        "--type", type=str, choices=[t.name for t in AggregateType], default=None
    )
    list_parser.add_argument("--category", type=str, default="")
    list_parser.add_argument(
        "--from", dest="date_from", type=date.fromisoformat, default=None,
        metavar="YYYY-MM-DD", help="First day of the created-date filter",
    )
    list_parser.add_argument(
        "--to", dest="date_to", type=date.fromisoformat, default=None,
        metavar="YYYY-MM-DD", help="Last day of the created-date filter (defaults to --from)",
    )
    list_parser.add_argument("--json", action="store_true", help="Output JSON")

    # show
    show_parser = sub.add_parser("show", help="Show one menu")
    show_parser.add_argument("menu_id")
    show_parser.add_argument("--json", action="store_true", help="Output JSON")

    # upload / edit
    upload_parser = sub.add_parser("upload", help="Upload a new menu")
    upload_parser.add_argument("name")
    _add_file_args(upload_parser)

    edit_parser = sub.add_parser("edit", help="Replace a menu's name and files")
    edit_parser.add_argument("menu_id")
    edit_parser.add_argument("name")
    _add_file_args(edit_parser)

    # delete
    delete_parser = sub.add_parser("delete", help="Delete a menu")
    delete_parser.add_argument("menu_id")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.logging.level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(_run(config, args))
    except (MenuboardError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _add_file_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--food", type=str, default=None, help="Food menu file")
    p.add_argument("--drink", type=str, default=None, help="Drink menu file")
    p.add_argument("--spa", type=str, default=None, help="Spa menu file")
    p.add_argument("--review-link", type=str, default="", help="Review link")


def _build_form(args) -> MenuForm:
    paths = {RoleSlot.FOOD: args.food, RoleSlot.DRINK: args.drink, RoleSlot.SPA: args.spa}
    files = {
        slot: UploadFile.from_path(path) for slot, path in paths.items() if path
    }
    return MenuForm(name=args.name, files=files, review_link=args.review_link)


async def _run(config, args) -> None:
    async with MenuServiceClient(
        base_url=config.backend.base_url, timeout=config.backend.timeout
    ) as client:
        credentials = create_credential_provider(config)
        controller = create_controller(config, client, credentials)

        match args.command:
            case "list":
                await _cmd_list(controller, args)
            case "show":
                await _cmd_show(client, credentials, args)
            case "upload":
                menu = await controller.create_menu(_build_form(args))
                print("Menu uploaded successfully!")
                print(f"  {menu.id}  {menu.name}  [{menu.summary()}]")
            case "edit":
                menu = await controller.update_menu(args.menu_id, _build_form(args))
                print("Menu updated successfully!")
                print(f"  {menu.id}  {menu.name}  [{menu.summary()}]")
            case "delete":
                await controller.delete_menu(args.menu_id)
                print("Menu deleted successfully!")


async def _cmd_list(controller: MenuListController, args) -> None:
    if args.search:
        controller.set_search(args.search)
    if args.type:
        controller.set_type(AggregateType[args.type])
    if args.category:
        controller.set_category(args.category)
    if args.date_from or args.date_to:
        for day in (args.date_from, args.date_to):
            if day is not None:
                controller.select_date(day)

    # Load page 1 first so the requested page can be clamped to the total
    await controller.refresh()
    if args.page > 1:
        controller.set_page(args.page)
        await controller.refresh()

    if controller.view_status is ViewStatus.FAILED:
        raise controller.error

    menus = controller.visible_menus
    if args.json:
        data = {
            "page": controller.page,
            "total_pages": controller.total_pages,
            "total": controller.total,
            "menus": [_menu_to_dict(m) for m in menus],
        }
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    print(
        f"My Menus ({controller.total})  "
        f"page {controller.page}/{controller.total_pages}  "
        f"[{daterange.format_range(controller.date_range)}]"
    )
    if not menus:
        if controller.date_range.is_empty:
            print("No menus yet. Upload a PDF or image menu to get started.")
        else:
            print("No menus found for the selected dates.")
        return
    for m in menus:
        print(f"  {m.id:<26} {m.name:<24} {m.summary()}")


async def _cmd_show(client, credentials, args) -> None:
    token = credentials.get_credential()
    if not token:
        raise AuthenticationError("Unauthorized: missing token")
    menu = map_menu(await client.get_menu(token, args.menu_id))

    if args.json:
        print(json.dumps(_menu_to_dict(menu), ensure_ascii=False, indent=2))
        return

    print(f"{menu.name}  ({menu.id})")
    print(f"  {menu.summary()}")
    if menu.category:
        print(f"  Category: {menu.category}")
    if menu.description:
        print(f"  {menu.description}")
    for f in menu.files:
        print(f"  [{f.role_slot.value}] {f.name} ({f.kind.value}) {f.url}")
    if menu.qr_target_url:
        print(f"  QR link: {menu.qr_target_url}")


def _menu_to_dict(menu: Menu) -> dict:
    return {
        "id": menu.id,
        "name": menu.name,
        "type": menu.aggregate_type.value,
        "total_size_bytes": menu.total_size_bytes,
        "created_at": menu.created_at.isoformat() if menu.created_at else None,
        "description": menu.description,
        "category": menu.category,
        "qr_target_url": menu.qr_target_url,
        "files": [
            {
                "slot": f.role_slot.value,
                "name": f.name,
                "kind": f.kind.value,
                "url": f.url,
                "size_bytes": f.size_bytes,
            }
            for f in menu.files
        ],
    }
