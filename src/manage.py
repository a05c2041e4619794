"""Marketplace database management CLI.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys

from marketplace.domain import marketplace
from marketplace.utils.db import drop_db, setup_db


def setup_databases():
    print("Initializing marketplace domain...")
    marketplace.init()
    touched = setup_db(marketplace)
    print(f"  schema ready on: {', '.join(touched) or 'no SQL providers'}")
    print("Done.")


def drop_databases():
    print("Initializing marketplace domain...")
    marketplace.init()
    touched = drop_db(marketplace)
    print(f"  schema dropped on: {', '.join(touched) or 'no SQL providers'}")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Marketplace database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
