#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import sys
from logging import DEBUG, INFO, getLogger
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

import uvicorn
from dotenv import load_dotenv

from chainsync.api import create_app
from chainsync.app import (
    cleanup_sync_logs,
    import_records,
    list_branches,
    list_sync_logs,
    records_from_payload,
    register_branch,
    summarize_sync_logs,
)
from chainsync.config import ConfigurationError, configure_logging, get_api_config
from chainsync.domain.model import EntityType, SyncDirection, SyncStatus
from chainsync.domain.reconciliation import RecordValidationError, SyncLogFilter

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chainsync", description="Reconcile ERP batches and push them to branches"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    importer = commands.add_parser("import", help="Import a JSON batch of ERP records")
    importer.add_argument("entity_type", choices=[item.value for item in EntityType])
    importer.add_argument("file", type=Path, help="JSON array, or object with records/updates")
    importer.add_argument("--total", type=int, help="Declared number of records in the batch")
    importer.add_argument(
        "--direction",
        choices=[item.value for item in SyncDirection],
        default=SyncDirection.IMPORT.value,
        help="Sync direction recorded in the sync log (default: %(default)s)",
    )

    branch = commands.add_parser("branch", help="Manage branch servers")
    branch_commands = branch.add_subparsers(dest="branch_command", required=True)
    branch_add = branch_commands.add_parser("add", help="Register or update a branch")
    branch_add.add_argument("--code", required=True)
    branch_add.add_argument("--name", required=True)
    branch_add.add_argument("--endpoint", help="Base URL of the branch server")
    branch_add.add_argument("--api-key", help="Bearer token the branch server expects")
    branch_add.add_argument("--inactive", action="store_true", help="Register as inactive")
    branch_commands.add_parser("list", help="List registered branches")

    sync_logs = commands.add_parser("sync-logs", help="Inspect and prune sync logs")
    sync_commands = sync_logs.add_subparsers(dest="sync_command", required=True)
    sync_list = sync_commands.add_parser("list", help="List recent sync logs")
    sync_list.add_argument("--entity-type", choices=[item.value for item in EntityType])
    sync_list.add_argument("--status", choices=[item.value for item in SyncStatus])
    sync_list.add_argument("--limit", type=int, default=20)
    sync_summary = sync_commands.add_parser("summary", help="Summarise sync health")
    sync_summary.add_argument("--days", type=int, help="Window in days")
    sync_cleanup = sync_commands.add_parser("cleanup", help="Delete old finished sync logs")
    sync_cleanup.add_argument("--older-than-days", type=int, help="Retention in days")

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Interface to bind")
    serve.add_argument("--port", type=int, help="Port to bind")
    return parser


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    args = _build_parser().parse_args(list(argv))
    for name in ("total", "limit", "days", "older_than_days", "port"):
        value = getattr(args, name, None)
        if value is not None and value < (0 if name == "total" else 1):
            raise ValueError(f"--{name.replace('_', '-')} must be positive")
    return args


def _load_records(path: Path) -> Sequence[object]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc.strerror or exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    return records_from_payload(payload)


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _run_import(args: argparse.Namespace, records: Sequence[object]) -> int:
    outcome = import_records(
        args.entity_type,
        records,
        declared_total=args.total,
        direction=SyncDirection(args.direction),
    )
    _print_json(outcome.to_dict())
    if not outcome.success:
        print("Error: All records failed validation", file=sys.stderr)
        return 1
    return 0


def _run_branch(args: argparse.Namespace) -> int:
    if args.branch_command == "add":
        _print_json(
            register_branch(
                args.code,
                args.name,
                api_endpoint=args.endpoint,
                api_key=args.api_key,
                is_active=not args.inactive,
            )
        )
    else:
        for branch in list_branches():
            state = "active" if branch["is_active"] else "inactive"
            print(f"{branch['code']}\t{branch['name']}\t{branch['api_endpoint'] or '-'}\t{state}")
    return 0


def _run_sync_logs(args: argparse.Namespace) -> int:
    if args.sync_command == "list":
        query = SyncLogFilter(
            entity_type=EntityType(args.entity_type) if args.entity_type else None,
            status=SyncStatus(args.status) if args.status else None,
            limit=args.limit,
        )
        _print_json([snapshot.to_dict() for snapshot in list_sync_logs(query)])
    elif args.sync_command == "summary":
        _print_json(summarize_sync_logs(days=args.days).to_dict())
    else:
        deleted = cleanup_sync_logs(older_than_days=args.older_than_days)
        print(f"Deleted {deleted} sync logs")
    return 0


def _run_serve(args: argparse.Namespace) -> int:
    config = get_api_config()
    uvicorn.run(create_app(), host=args.host or config.host, port=args.port or config.port)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    records: Sequence[object] = ()
    try:
        args = _parse_args(sys.argv[1:] if argv is None else argv)
        if args.command == "import":
            records = _load_records(args.file)
    except (ValueError, RecordValidationError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    configure_logging(level=DEBUG if args.verbose else INFO)

    try:
        if args.command == "import":
            code = _run_import(args, records)
        elif args.command == "branch":
            code = _run_branch(args)
        elif args.command == "sync-logs":
            code = _run_sync_logs(args)
        else:
            code = _run_serve(args)
    except RecordValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:
        log.exception("chainsync %s failed", args.command)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if code:
        sys.exit(code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
