#!/usr/bin/env python3
"""Expire pending invitations whose validity window has passed.

Meant to run from cron or a scheduled job. Each expiry is written to the
audit log as a system action.

Usage:
    ./scripts/expire_invitations.py
    ./scripts/expire_invitations.py --dry-run
    ./scripts/expire_invitations.py --verbose
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import structlog

root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path / "src" / "backoffice"))

from access.dependencies import get_invitation_service  # noqa: E402
from infrastructure.database.dependencies import (  # noqa: E402
    close_database_connections,
    session_scope,
)
from infrastructure.logging import configure_logging  # noqa: E402


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Expire stale pending invitations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Database connection is read from BACKOFFICE_DB_* environment variables.
        """,
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report the invitations that would expire without changing them",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Emit debug logging",
    )
    return parser.parse_args()


async def run(dry_run: bool) -> int:
    logger = structlog.get_logger()
    try:
        async with session_scope() as session:
            expired = await get_invitation_service(session).expire_stale(dry_run=dry_run)
    finally:
        await close_database_connections()

    for invitation in expired:
        logger.info(
            "invitation_expiry_candidate" if dry_run else "invitation_expired_by_job",
            invitation_id=invitation.id.value,
            tenant_id=invitation.tenant_id.value if invitation.tenant_id else None,
            expires_at=invitation.expires_at.isoformat() if invitation.expires_at else None,
        )
    logger.info("invitation_sweep_finished", count=len(expired), dry_run=dry_run)
    return len(expired)


def main():
    args = parse_args()
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    asyncio.run(run(args.dry_run))


if __name__ == "__main__":
    main()
