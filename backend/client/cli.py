"""
Command-line front end for the inventory API.

  python -m client.cli devices
  python -m client.cli scan [--device 0]
  python -m client.cli list [--page 1] [--page-size 50]
  python -m client.cli low-stock

Uses INVENTORY_API_URL plus INVENTORY_API_TOKEN or
INVENTORY_API_EMAIL / INVENTORY_API_PASSWORD (see client.api.make_client_from_env).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from dotenv import load_dotenv

from client.api import InventoryApiClient, make_client_from_env
from client.item_form import ItemFormController
from client.lookup import ProductLookupClient
from client.scanner import BarcodeScanner
from client.stats import inventory_stats
from schemas.inventory import InventoryItem


def _print_items(items: List[InventoryItem]) -> None:
    for it in items:
        flag = "!" if it.is_low_stock else " "
        print(f"{flag} {it.name:<30} {it.category:<15} {it.quantity:>10} {it.unit:<8} ${it.price:,.2f}  {it.supplier}")


def cmd_devices(args: argparse.Namespace, api: Optional[InventoryApiClient]) -> int:
    scanner = BarcodeScanner(args.origin)
    devices = scanner.list_devices()
    if not devices:
        print("No cameras available (manual UPC entry still works).")
        return 0
    for d in devices:
        print(f"{d.device_id}\t{d.label}")
    return 0


def cmd_scan(args: argparse.Namespace, api: InventoryApiClient) -> int:
    form = ItemFormController(lookup_client=ProductLookupClient(api))
    scanner = BarcodeScanner(args.origin)
    code = asyncio.run(form.scan(scanner, args.device))
    if form.camera_notice:
        print(form.camera_notice, file=sys.stderr)
        return 1
    if code is None:
        print(form.lookup_error or "No barcode scanned", file=sys.stderr)
        return 1
    print(f"UPC: {code}")
    if form.lookup_error:
        print(form.lookup_error, file=sys.stderr)
        return 1
    print(json.dumps({
        "name": form.draft.name,
        "category": form.draft.category,
        "supplier": form.draft.supplier,
    }, indent=2))
    return 0


def cmd_list(args: argparse.Namespace, api: InventoryApiClient) -> int:
    envelope = api.fetch_inventory(args.page, args.page_size)
    if not envelope.get("success"):
        print(envelope.get("error") or "Request failed", file=sys.stderr)
        return 1
    items = [InventoryItem.model_validate(d) for d in envelope.get("data") or []]
    _print_items(items)
    stats = inventory_stats(items)
    pagination = envelope.get("pagination") or {}
    print(
        f"\nPage {pagination.get('page', args.page)}/{pagination.get('totalPages', 1)}"
        f" - {stats['total_items']} items, {stats['low_stock_count']} low stock,"
        f" total value ${stats['total_value']:,.2f}"
    )
    return 0


def cmd_low_stock(args: argparse.Namespace, api: InventoryApiClient) -> int:
    envelope = api.low_stock_items()
    if not envelope.get("success"):
        print(envelope.get("error") or "Request failed", file=sys.stderr)
        return 1
    _print_items([InventoryItem.model_validate(d) for d in envelope.get("data") or []])
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Inventory tracker client")
    p.add_argument("--origin", default=None, help="Origin the scanner runs under (defaults to INVENTORY_API_URL)")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("devices", help="List cameras")

    scan = sub.add_parser("scan", help="Scan a barcode and look it up")
    scan.add_argument("--device", default=None, help="Camera device id (see `devices`)")

    ls = sub.add_parser("list", help="List inventory items")
    ls.add_argument("--page", type=int, default=1)
    ls.add_argument("--page-size", type=int, default=50)

    sub.add_parser("low-stock", help="List items at or below minimum stock")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    if args.command == "devices":
        args.origin = args.origin or "http://localhost"
        return cmd_devices(args, None)

    api = make_client_from_env()
    args.origin = args.origin or api.base_url
    handlers = {
        "scan": cmd_scan,
        "list": cmd_list,
        "low-stock": cmd_low_stock,
    }
    return handlers[args.command](args, api)


if __name__ == "__main__":
    sys.exit(main())
