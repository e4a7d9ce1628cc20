#!/usr/bin/env python3
"""
Salon inventory management CLI.

Usage:
    python manage.py migrate                          Apply pending SQL migrations
    python manage.py serve                            Start the API server
    python manage.py sweep-expired --branch BRANCH    Mark past-date batches expired
"""

import argparse
import asyncio
import sys
from datetime import date

from salon_inventory.config import configure_logging, get_settings


def cmd_migrate(args: argparse.Namespace) -> None:
    from salon_inventory.infrastructure.storage.sqlite.migrations import run_migrations

    results = asyncio.run(run_migrations(create_backup_before=not args.no_backup))
    failed = [r for r in results if not r.success]
    for r in failed:
        print(f"Migration v{r.version}_{r.name} failed: {r.error}")
    if failed:
        sys.exit(1)
    print(f"Applied {len(results)} migration(s).")


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "salon_inventory.api.main:app",
        host=args.host or settings.api.host,
        port=args.port or settings.api.port,
        reload=args.reload,
    )


async def _sweep(branch_id: str, today: date | None) -> int:
    from salon_inventory.application.use_cases import UpdateExpirationStatusUseCase
    from salon_inventory.infrastructure.storage.sqlite import close_pool
    from salon_inventory.infrastructure.storage.sqlite.migrations import run_migrations

    await run_migrations(create_backup_before=False)
    try:
        result = await UpdateExpirationStatusUseCase().execute(branch_id, today=today)
    finally:
        await close_pool()
    print(result.message)
    return result.updated_count


def cmd_sweep_expired(args: argparse.Namespace) -> None:
    today = date.fromisoformat(args.today) if args.today else None
    asyncio.run(_sweep(args.branch, today))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Salon inventory management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending SQL migrations")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    p_migrate.set_defaults(func=cmd_migrate)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=None, help="Bind host (default: from settings)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: from settings)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # sweep-expired
    p_sweep = sub.add_parser("sweep-expired", help="Mark past-date active batches expired")
    p_sweep.add_argument("--branch", required=True, help="Branch ID to sweep")
    p_sweep.add_argument("--today", default=None, help="Reference date, YYYY-MM-DD (default: today)")
    p_sweep.set_defaults(func=cmd_sweep_expired)

    args = parser.parse_args()
    configure_logging()
    args.func(args)


if __name__ == "__main__":
    main()
