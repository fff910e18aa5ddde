import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse

import structlog

from hotel_backoffice.db.engine import engine
from hotel_backoffice.db.writers.reservations import normalize_legacy_rows
from hotel_backoffice.logging_config import setup_logging

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    """
    One-off migration: rewrite free-text reservation statuses and sources.

    Run once before deploying a version that reads statuses strictly; rows
    with unrecognised statuses otherwise fail to load.
    """
    parser = argparse.ArgumentParser(description="Normalize legacy reservation statuses")
    parser.add_argument("--dry-run", action="store_true", help="Only log the rows to rewrite")
    args = parser.parse_args()

    try:
        changed = normalize_legacy_rows(engine, dry_run=args.dry_run)
        logger.info("normalize_statuses_finished", changed=changed, dry_run=args.dry_run)
    except Exception:
        logger.exception("normalize_statuses_failed")
        raise


if __name__ == "__main__":
    main()
