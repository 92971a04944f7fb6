#!/usr/bin/env python3
"""Dump everything the vendor dashboard store publishes.

This script logs in, runs the home-screen load and prints the store
snapshot (session, bookings, reviews, place, notifications) so you can
check what the cache and the backend return.

Usage
-----
Set environment variables and run::

    export VENDOR_API_BASE_URL="http://localhost:5001"
    export VENDOR_EMAIL="owner@example.com"
    export VENDOR_PASSWORD="your-password"
    python scripts/dump_dashboard.py

Options::

    --refresh            Force-refresh every group after the home load
    --listen SECONDS     Keep the push subscription open and log inserts
    --json               Output as machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from vendorsync import Notification, VendorClient, VendorSyncConfig  # noqa: E402
from vendorsync.state.events import EntityGroup  # noqa: E402

_LOG = logging.getLogger("dump_dashboard")


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _on_notification(notification: Notification) -> None:
    _LOG.info("push insert id=%s title=%s", notification.id, notification.title)


def _render(snapshot: dict[str, Any]) -> str:
    out: list[str] = []
    for group in EntityGroup:
        state = snapshot[group.value]
        out.append(_section(f"{group.value.upper()} loading={state['loading']} error={state['error']}"))
        out.append(json.dumps(state["data"], indent=2, default=str, ensure_ascii=False))
    return "\n".join(out)


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Dump the vendor dashboard store for debugging / development.",
    )
    parser.add_argument("--refresh", action="store_true", help="Force-refresh every group after loading")
    parser.add_argument("--listen", type=float, default=0.0, help="Seconds to keep listening for push inserts")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    email = os.environ.get("VENDOR_EMAIL")
    password = os.environ.get("VENDOR_PASSWORD")
    if not email or not password:
        parser.error("VENDOR_EMAIL and VENDOR_PASSWORD must be set")

    config = VendorSyncConfig.from_env()
    async with VendorClient(config, on_notification=_on_notification) as client:
        session = await client.login(email, password)
        _LOG.info("logged in vendor_id=%s place_id=%s", session.id, session.place_id)

        await client.load_home()
        if args.refresh:
            await client.refresh_all()
        if args.listen > 0:
            _LOG.info("listening for push inserts for %.0fs", args.listen)
            await asyncio.sleep(args.listen)

        result: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "api_base_url": config.api_base_url,
            **client.store.snapshot().model_dump(mode="json"),
        }

    payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
    text = payload if args.json_mode else _render(result)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"JSON written to {args.output}", file=sys.stderr)
    else:
        print(text)


if __name__ == "__main__":
    asyncio.run(main())
