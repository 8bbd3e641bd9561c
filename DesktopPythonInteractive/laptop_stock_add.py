#!/usr/bin/env python3
"""
laptop_stock_add.py

Purpose:
  Add one or more identical laptops to stock through the tracker API.
  Each laptop becomes its own stock unit on the server; the response lists them.

API:
  Base: http://localhost:3001/api/v1
  Resource: /laptops
  Create: POST /laptops   -> body: {"brand": ..., "model": ..., "quantity": N, ...}
  Groups: GET  /laptops/groups

Examples:
  python laptop_stock_add.py Dell "Latitude 5420" --ram 16 --storage-size 512 --cost 32000
  python laptop_stock_add.py HP "EliteBook 840" --ram 8 --storage-size 256 --storage-type HDD \\
      --condition Used --cost 18500 --quantity 3
  python laptop_stock_add.py Lenovo T14 --ram 16 --storage-size 512 --cost 40000 --show-groups

Exit codes:
  0 = success
  1 = handled application error (bad input, API rejected the laptops)
  2 = network/HTTP error
"""

from __future__ import annotations
import argparse
import json
import os
import sys
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence

import requests

DEFAULT_BASE_URL = os.getenv("LAPTOP_TRACKER_URL", "http://localhost:3001/api/v1")
RESOURCE_PATH = "laptops"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Add laptops to stock in the tracker API.")
    p.add_argument("brand", help="Laptop brand (e.g. 'Dell').")
    p.add_argument("model", help="Laptop model (e.g. 'Latitude 5420').")
    p.add_argument("--processor", default="", help="Processor description (e.g. 'i5-1145G7').")
    p.add_argument("--ram", type=int, required=True, help="Memory in GB.")
    p.add_argument("--storage-size", type=int, required=True, help="Storage size in GB.")
    p.add_argument("--storage-type", default="SSD", choices=["SSD", "HDD", "NVMe"],
                   help="Storage type (default: SSD).")
    p.add_argument("--graphics", default=None, help="Dedicated graphics card, if any.")
    p.add_argument("--condition", default="New", choices=["New", "Used"],
                   help="Condition of the laptops (default: New).")
    p.add_argument("--cost", required=True, help="Buying cost per laptop.")
    p.add_argument("--target-price", default=None, help="Optional target selling price per laptop.")
    p.add_argument("-q", "--quantity", type=int, default=1, help="How many identical laptops (default: 1).")
    p.add_argument("--base-url", default=DEFAULT_BASE_URL,
                   help=f"Base API URL (default: {DEFAULT_BASE_URL})")
    p.add_argument("--timeout", type=float, default=15.0,
                   help="HTTP timeout in seconds (default: 15)")
    p.add_argument("--show-groups", action="store_true",
                   help="Print the grouped stock after adding.")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Verbose logging to stderr.")
    return p.parse_args(argv)


def _amount(value: Optional[str], label: str) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip().replace(",", "").replace("₹", "").replace("$", "")
    try:
        amount = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"{label} must be a number, got {value!r}") from exc
    if amount <= 0:
        raise ValueError(f"{label} must be a positive number")
    return str(amount)


def build_payload(args: argparse.Namespace) -> Dict[str, Any]:
    if args.quantity <= 0:
        raise ValueError("quantity must be a positive number")
    if args.ram <= 0:
        raise ValueError("ram must be a positive number")
    payload: Dict[str, Any] = {
        "brand": args.brand.strip(),
        "model": args.model.strip(),
        "processor": args.processor.strip(),
        "ram": args.ram,
        "storage_size_gb": args.storage_size,
        "storage_type": args.storage_type,
        "condition": args.condition,
        "buying_cost": _amount(args.cost, "cost"),
        "quantity": args.quantity,
    }
    if args.graphics:
        payload["graphics_card"] = args.graphics.strip()
    target = _amount(args.target_price, "target price")
    if target is not None:
        payload["target_selling_price"] = target
    return payload


def vprint(enabled: bool, *args: Any) -> None:
    if enabled:
        print(*args, file=sys.stderr)


def _error_detail(r: requests.Response) -> str:
    try:
        return json.dumps(r.json(), indent=2)
    except ValueError:
        return r.text


def api_add_laptops(session: requests.Session, base_url: str, payload: Dict[str, Any],
                    timeout: float, verbose: bool) -> List[Dict[str, Any]]:
    url = f"{base_url.rstrip('/')}/{RESOURCE_PATH}"
    vprint(verbose, f"POST {url} json={payload}")
    r = session.post(url, headers={"Accept": "application/json"}, json=payload, timeout=timeout)
    if r.status_code == 422:
        raise ValueError(f"Laptops rejected: {_error_detail(r)}")
    if r.status_code not in (200, 201):
        raise requests.HTTPError(f"Add failed ({r.status_code}): {_error_detail(r)}", response=r)
    data = r.json()
    if not isinstance(data, list):
        raise ValueError(f"Expected list from POST {url}, got: {type(data).__name__}")
    return data


def api_list_groups(session: requests.Session, base_url: str, timeout: float,
                    verbose: bool) -> List[Dict[str, Any]]:
    url = f"{base_url.rstrip('/')}/{RESOURCE_PATH}/groups"
    vprint(verbose, f"GET {url}")
    r = session.get(url, headers={"Accept": "application/json"}, timeout=timeout)
    r.raise_for_status()
    return r.json()


def main(argv: Optional[Sequence[str]] = None, session: Optional[requests.Session] = None) -> int:
    args = parse_args(argv)
    session = session or requests.Session()
    try:
        payload = build_payload(args)
        created = api_add_laptops(session, args.base_url, payload, args.timeout, args.verbose)
        result: Dict[str, Any] = {
            "status": "created",
            "quantity": len(created),
            "ids": [item.get("id") for item in created],
        }
        if args.show_groups:
            groups = api_list_groups(session, args.base_url, args.timeout, args.verbose)
            result["groups"] = [
                {"label": group.get("label"), "quantity": group.get("quantity")} for group in groups
            ]
        print(json.dumps(result, indent=2))
        return 0

    except requests.exceptions.RequestException as e:
        print(f"NETWORK_ERROR: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
