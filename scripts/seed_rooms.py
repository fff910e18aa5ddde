import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import json

import structlog

from hotel_backoffice.db.engine import engine
from hotel_backoffice.db.writers.rooms import insert_rooms
from hotel_backoffice.logging_config import setup_logging

setup_logging()
logger = structlog.get_logger(__name__)


def load_rooms(path: str) -> list[dict[str, object]]:
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of rooms")
    return data


def main() -> None:
    """
    Load rooms from a JSON file, e.g.:

        [{"name": "Deluxe 101", "capacity": 2, "price_per_night": 2500, "amenities": ["wifi"]}]
    """
    parser = argparse.ArgumentParser(description="Seed rooms from a JSON file")
    parser.add_argument("path", help="JSON file containing a list of rooms")
    parser.add_argument("--dry-run", action="store_true", help="Validate and log only")
    args = parser.parse_args()

    rooms = load_rooms(args.path)
    ids = insert_rooms(engine=engine, data=rooms, dry_run=args.dry_run)
    logger.info("seed_rooms_finished", requested=len(rooms), inserted=len(ids))


if __name__ == "__main__":
    main()
