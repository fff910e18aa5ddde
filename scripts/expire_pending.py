import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse

import structlog

from hotel_backoffice.db.engine import engine
from hotel_backoffice.logging_config import setup_logging
from hotel_backoffice.services.reservations import expire_pending_reservations
from hotel_backoffice.utils.datetime import SystemClock

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    """
    Expire unpaid Pending reservations whose payment window has lapsed.

    Meant to run from cron (e.g. every 15 minutes).
    """
    parser = argparse.ArgumentParser(description="Expire unpaid Pending reservations")
    parser.add_argument("--dry-run", action="store_true", help="Only log what would expire")
    args = parser.parse_args()

    logger.info("expiry_sweep_started", dry_run=args.dry_run)

    try:
        expired = expire_pending_reservations(engine, SystemClock(), dry_run=args.dry_run)
        logger.info("expiry_sweep_finished", count=len(expired), dry_run=args.dry_run)
    except Exception:
        logger.exception("expiry_sweep_failed")
        raise


if __name__ == "__main__":
    main()
