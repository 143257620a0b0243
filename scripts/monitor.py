#!/usr/bin/env python3
"""Show quota telemetry from the local language server.

Discovers the language-server process, establishes the uplink, runs one
acquisition and prints the snapshot. With ``--watch`` it keeps polling
on the configured interval and prints every event.

Usage
-----
::

    python scripts/monitor.py
    python scripts/monitor.py --json
    python scripts/monitor.py --watch --interval 60 -v

Options::

    --json               Output the snapshot as machine-readable JSON
    --watch              Keep polling and print events until interrupted
    --interval SECONDS   Scan interval for --watch (clamped to 30..86400)
    --diagnostics        Print the redacted diagnostics dump after the scan
    --verbose, -v        Enable debug logging

Thresholds and other settings are read from ``AGT_*`` environment
variables (see ``TelemetryConfig.from_env``).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from agtelemetry import (  # noqa: E402
    TelemetryClient,
    TelemetryConfig,
    TelemetryEvent,
    TelemetryReceived,
    TelemetrySnapshot,
    derive_alerts,
)
from agtelemetry.sanitize import sanitize_label  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _format_snapshot(snapshot: TelemetrySnapshot) -> str:
    out: list[str] = [_section(f"FUEL STATUS  ({snapshot.overall_readiness.value.upper()})")]
    out.append(f"  time      : {snapshot.timestamp.isoformat()}")
    out.append(f"  alerts    : {snapshot.active_alert_count}")
    out.append("")
    out.append(f"  {'System':<34} {'Fuel':>6}  {'Readiness':<9} {'Pool':<7} Resets")
    out.append("  " + "-" * 72)
    for system in snapshot.systems:
        reset = system.replenishment_at.isoformat() if system.replenishment_at else "-"
        out.append(
            f"  {sanitize_label(system.designation, 34):<34} {system.percentage:>5.1f}%  "
            f"{system.readiness.value:<9} {system.quota_pool_id or '-':<7} {reset}"
        )
    alerts = derive_alerts(snapshot.systems)
    if alerts:
        out.append("")
        for alert in alerts:
            out.append(f"  [{alert.level.value.upper()}] {alert.system_designation}: {alert.message}")
    return "\n".join(out)


def _print_event(event: TelemetryEvent) -> None:
    if isinstance(event, TelemetryReceived):
        print(_format_snapshot(event.snapshot))
        return
    detail = event.model_dump(exclude={"type", "timestamp"}, mode="json")
    print(f"{event.timestamp.isoformat()}  {event.type.value:<22} {detail}")


# ── main ─────────────────────────────────────────────────────


async def main() -> int:
    parser = argparse.ArgumentParser(description="Show quota telemetry from the local language server.")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--watch", action="store_true", help="Keep polling until interrupted")
    parser.add_argument("--interval", type=float, help="Scan interval in seconds for --watch")
    parser.add_argument("--diagnostics", action="store_true", help="Print redacted diagnostics")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = TelemetryConfig.from_env()

    async with TelemetryClient(config) as client:
        if args.watch:
            client.subscribe(_print_event)

        snapshot = await client.acquire_telemetry()
        exit_code = 0 if snapshot is not None else 1

        if not args.watch:
            if snapshot is None:
                print("No telemetry: language server not found or not answering.", file=sys.stderr)
            elif args.json_mode:
                print(json.dumps(snapshot.model_dump(mode="json"), indent=2, ensure_ascii=False))
            else:
                print(_format_snapshot(snapshot))

        if args.diagnostics:
            diagnostics: dict[str, Any] = client.diagnostics()
            print(json.dumps(diagnostics, indent=2, default=str, ensure_ascii=False))

        if args.watch:
            client.start_periodic_scans(args.interval)
            # Runs until Ctrl+C cancels the main task.
            await asyncio.Event().wait()

    return exit_code


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)
