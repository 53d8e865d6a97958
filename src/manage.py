"""Database management CLI for the marketplace.

Usage:
    python src/manage.py setup-db
    python src/manage.py drop-db
"""

import argparse
import sys

import structlog

from marketplace.domain import marketplace
from marketplace.utils.db import drop_db, setup_db

logger = structlog.get_logger(__name__)

COMMANDS = {
    "setup-db": setup_db,
    "drop-db": drop_db,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Marketplace database management")
    parser.add_argument("command", choices=sorted(COMMANDS), help="Operation to run")
    args = parser.parse_args(argv)

    marketplace.init()
    providers = COMMANDS[args.command](marketplace)
    if providers:
        logger.info("Database command completed", command=args.command, providers=providers)
    else:
        logger.info("No relational providers configured, nothing to do", command=args.command)
    return 0


if __name__ == "__main__":
    sys.exit(main())
