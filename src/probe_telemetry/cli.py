"""Command-line entry point for watching telemetry and editing client config files."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .api_client import TelemetryApiClient
from .config_file_transaction import ConfigFileTransactionRegistry
from .constants import DEFAULT_CONFIG_FILE_NAME
from .exceptions import ApplicationError
from .logging_config import setup_logging
from .views import ClientDetailsView, DashboardView

logger = logging.getLogger(__name__)


def print_dashboard(view: DashboardView) -> None:
    summary = view.summary
    print(
        f"Clients: {summary.total_clients} ({summary.online_clients} online, {summary.offline_clients} offline) | "
        f"Requests: {summary.total_requests} ({summary.error_requests} errors) | "
        f"Success rate: {summary.success_rate}%"
    )
    for entry in view.recent_requests:
        request = entry.request
        outcome = request.error_type or request.error or request.status_code
        print(f"  {request.start_time:%H:%M:%S} {entry.client_name:<20} {request.target_name:<16} {outcome} {request.total_time:.0f}ms")


def print_client_details(view: ClientDetailsView) -> None:
    client = view.client
    if client is None:
        print(f"Client {view.client_id}: not available")
        return
    stats = view.stats
    print(f"{client.name} [{client.status.value}] {client.ip_address} v{client.version}")
    print(
        f"  {stats.total} requests, {stats.success_count} ok, {stats.error_count} failed | "
        f"avg total {stats.avg_total_time}ms dns {stats.avg_dns_time}ms "
        f"tcp {stats.avg_tcp_time}ms tls {stats.avg_tls_time}ms"
    )


async def _watch(view, printer, once: bool) -> int:
    if once:
        try:
            await view.refresh()
        except ApplicationError as exc:
            logger.error("Refresh failed: %s", exc)
            return 1
        printer(view)
        return 0

    view.start()
    try:
        await asyncio.Event().wait()
    finally:
        await view.close()
    return 0


async def _run_dashboard(args: argparse.Namespace) -> int:
    async with TelemetryApiClient() as api:
        view = DashboardView(api, on_update=print_dashboard)
        return await _watch(view, print_dashboard, args.once)


async def _run_client(args: argparse.Namespace) -> int:
    async with TelemetryApiClient() as api:
        view = ClientDetailsView(api, args.client_id, on_update=print_client_details)
        return await _watch(view, print_client_details, args.once)


async def _run_edit_config(args: argparse.Namespace) -> int:
    content = Path(args.content_file).read_text(encoding="utf-8")
    async with TelemetryApiClient() as api:
        transaction = ConfigFileTransactionRegistry(api).for_client(args.client_id)
        session = await transaction.open(args.path)
        if session.from_default:
            logger.warning("Remote %s unavailable; editing the default document", args.path)
        transaction.edit(content)
        result = await transaction.save()
    if not result.success:
        print(f"Save failed: {result.error}", file=sys.stderr)
        return 1
    print(f"Saved {result.path} on client {result.client_id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="probe-telemetry", description="Network probe telemetry dashboard")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    dashboard = subparsers.add_parser("dashboard", help="Fleet summary and recent probes")
    dashboard.add_argument("--once", action="store_true", help="Refresh once and exit")
    dashboard.set_defaults(handler=_run_dashboard)

    client = subparsers.add_parser("client", help="Stats for one client")
    client.add_argument("client_id")
    client.add_argument("--once", action="store_true", help="Refresh once and exit")
    client.set_defaults(handler=_run_client)

    edit = subparsers.add_parser("edit-config", help="Replace a remote client config file")
    edit.add_argument("client_id")
    edit.add_argument("--path", default=DEFAULT_CONFIG_FILE_NAME)
    edit.add_argument("--content-file", required=True)
    edit.set_defaults(handler=_run_edit_config)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(user_friendly=not args.verbose, level=logging.DEBUG if args.verbose else logging.INFO)
    try:
        return asyncio.run(args.handler(args))
    except KeyboardInterrupt:
        logger.info("probe-telemetry interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
