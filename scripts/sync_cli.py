"""
Operator commands for the HotelSphere local store and replica sync.

Usage:
    python scripts/sync_cli.py bootstrap
    python scripts/sync_cli.py resync
    python scripts/sync_cli.py status
    python scripts/sync_cli.py listen [--count N]
    python scripts/sync_cli.py export ./backups
    python scripts/sync_cli.py import ./backups/hotelsphere_backup_2026-10-19.json
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _setup_django() -> None:
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
    import django
    from django.core.management import call_command

    django.setup()
    call_command("migrate", verbosity=0, interactive=False)


def _print(payload: dict) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, default=str))


def cmd_bootstrap(args: argparse.Namespace) -> int:
    from core.sync.wiring import build_coordinator

    result = build_coordinator().bootstrap()
    _print(result.to_dict())
    return 0 if result.replica_reachable else 1


def cmd_resync(args: argparse.Namespace) -> int:
    from core.sync.errors import SyncError
    from core.sync.wiring import build_coordinator
    from integration.adapters import IntegrationError

    try:
        result = build_coordinator().force_resync()
    except (IntegrationError, SyncError) as exc:
        print(f"resync failed: {exc}", file=sys.stderr)
        return 1
    _print(result.to_dict())
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    from core.sync.wiring import build_coordinator

    _print(build_coordinator().status())
    return 0


def cmd_listen(args: argparse.Namespace) -> int:
    from core.sync.wiring import build_coordinator, build_listener
    from integration.adapters import IntegrationError

    coordinator = build_coordinator()
    coordinator.bootstrap()
    listener = build_listener(coordinator)
    try:
        delivered = listener.listen(max_messages=args.count)
    except IntegrationError as exc:
        print(f"listen failed: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        listener.stop()
        return 0
    print(f"{delivered} change(s) applied")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    from core.local_store.backup import write_backup
    from core.local_store.store import LocalStore

    path = write_backup(LocalStore(), args.path)
    print(f"backup written to {path}")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    from core.local_store.backup import import_snapshot, read_backup
    from core.local_store.errors import LocalStoreError
    from core.local_store.store import LocalStore

    try:
        written = import_snapshot(LocalStore(), read_backup(args.path))
    except (LocalStoreError, OSError) as exc:
        print(f"import failed: {exc}", file=sys.stderr)
        return 1
    _print(written)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="HotelSphere sync operator commands")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("bootstrap", help="reconcile local store with the replica").set_defaults(func=cmd_bootstrap)
    sub.add_parser("resync", help="replace local data with the replica snapshot").set_defaults(func=cmd_resync)
    sub.add_parser("status", help="sync health and table counts").set_defaults(func=cmd_status)

    listen = sub.add_parser("listen", help="bootstrap, then apply replica changes as they arrive")
    listen.add_argument("--count", type=int, default=None, help="stop after N changes")
    listen.set_defaults(func=cmd_listen)

    export = sub.add_parser("export", help="write a JSON backup of all tables")
    export.add_argument("path", help="target file or directory")
    export.set_defaults(func=cmd_export)

    restore = sub.add_parser("import", help="restore tables from a JSON backup")
    restore.add_argument("path", help="backup file")
    restore.set_defaults(func=cmd_import)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_django()
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
