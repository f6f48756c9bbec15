#!/usr/bin/env python3
"""Seed a rooms-mgmt store with sample branches, rooms and billing history.

The backend comes from the environment (see ``RoomsMgmtConfig.from_env``)
unless ``--json-path`` is given.
"""

import argparse
import logging
from pathlib import Path

from rooms_mgmt.config import RoomsMgmtConfig
from rooms_mgmt.generators import RentalGenerator
from rooms_mgmt.logging import setup_logging
from rooms_mgmt.store import open_store

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate sample rental data")
    parser.add_argument(
        "--branches",
        type=int,
        default=2,
        help="Number of branches to create (default: 2)",
    )
    parser.add_argument(
        "--rooms",
        type=int,
        default=4,
        help="Rooms per branch (default: 4)",
    )
    parser.add_argument(
        "--months",
        type=int,
        default=3,
        help="Billing periods of history per room (default: 3)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--json-path",
        type=Path,
        default=None,
        help="Write to this JSON file instead of the configured backend",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete existing branches, rooms, utilities and payments first",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config = RoomsMgmtConfig.from_env()
    if args.json_path is not None:
        config.storage.backend = "json"
        config.storage.json_path = args.json_path
    setup_logging(config.log_level, config.log_format)

    store = open_store(config)
    try:
        if args.clear:
            store.clear_all()

        generator = RentalGenerator(seed=args.seed if args.seed is not None else config.seed)
        summary = generator.populate(
            store,
            num_branches=args.branches,
            rooms_per_branch=args.rooms,
            months=args.months,
        )
    finally:
        store.backend.close()

    logger.info(
        "Store now holds %d branches, %d rooms (%d paid / %d unpaid this month)",
        summary["branches"],
        summary["rooms"],
        summary["paid_rooms"],
        summary["unpaid_rooms"],
    )


if __name__ == "__main__":
    main()
