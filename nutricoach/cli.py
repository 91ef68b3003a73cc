# -*- coding: utf-8 -*-
"""
Operational commands.

Usage:
    python -m nutricoach.cli init-db
    python -m nutricoach.cli retarget [--seed N]
    python -m nutricoach.cli automate
    python -m nutricoach.cli motivate [--seed N]
    python -m nutricoach.cli serve
"""

from __future__ import annotations

import argparse
import json
import random
import sys
from pathlib import Path

from .config import configure_logging, settings


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create the database schema."""
    from .app_db import init_app_db

    init_app_db(settings.app_db_path)
    print(f"Database ready: {settings.app_db_path}")
    return 0


def cmd_retarget(args: argparse.Namespace) -> int:
    """Run one retargeting sweep and print its summary."""
    from .app_db import init_app_db
    from .workflow.retargeting import run_retargeting_sweep

    init_app_db(settings.app_db_path)
    rng = random.Random(args.seed) if args.seed is not None else None
    summary = run_retargeting_sweep(rng=rng)
    print(json.dumps(summary.model_dump(mode="json"), ensure_ascii=False, indent=2))
    return 1 if any(r.status == "error" for r in summary.results) else 0


def cmd_automate(args: argparse.Namespace) -> int:
    """Run due scheduled workflow actions once."""
    from .app_db import init_app_db
    from .workflow.automation import process_workflow_automation

    init_app_db(settings.app_db_path)
    summary = process_workflow_automation()
    print(json.dumps(summary.model_dump(mode="json"), ensure_ascii=False, indent=2))
    return 1 if any(r.status == "error" for r in summary.results) else 0


def cmd_motivate(args: argparse.Namespace) -> int:
    """Send the daily motivation message to every active client."""
    from .app_db import init_app_db
    from .errors import NoActiveTemplates
    from .messaging.motivation import send_daily_motivation

    init_app_db(settings.app_db_path)
    rng = random.Random(args.seed) if args.seed is not None else None
    try:
        summary = send_daily_motivation(rng=rng)
    except NoActiveTemplates as exc:
        print(exc.message, file=sys.stderr)
        return 1
    print(json.dumps(summary.model_dump(mode="json"), ensure_ascii=False, indent=2))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the HTTP API."""
    from .api import run

    run()
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Nutricoach CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--db-path",
        help="Path to the SQLite database (default: $NUTRICOACH_DB_PATH or data/nutricoach.db)",
    )
    parser.add_argument("--log-level", help="Logging level (default: $NUTRICOACH_LOG_LEVEL)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("init-db", help="Create the database schema")

    retarget_parser = subparsers.add_parser("retarget", help="Send due retargeting messages once")
    retarget_parser.add_argument("--seed", type=int, help="Seed for template shuffling")

    subparsers.add_parser("automate", help="Run due scheduled workflow actions once")

    motivate_parser = subparsers.add_parser("motivate", help="Send daily motivation messages")
    motivate_parser.add_argument("--seed", type=int, help="Seed for template choice")

    subparsers.add_parser("serve", help="Run the API server")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.log_level.upper() if args.log_level else None)
    if args.db_path:
        settings.app_db_path = Path(args.db_path).expanduser()

    commands = {
        "init-db": cmd_init_db,
        "retarget": cmd_retarget,
        "automate": cmd_automate,
        "motivate": cmd_motivate,
        "serve": cmd_serve,
    }
    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
