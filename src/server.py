"""Protean Engine runner for the marketplace domain.

In production ``event_processing`` is async, so order, ledger and courier
events reach their handlers and projectors through this Engine rather than
inside the command's unit of work.

Usage:
    python src/server.py
    python src/server.py --test-mode   # drain pending messages and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine

from marketplace.domain import marketplace
from marketplace.utils.logging import configure_logging


async def run(test_mode=False):
    marketplace.init()
    engine = Engine(marketplace, test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Marketplace Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and stop",
    )
    args = parser.parse_args()

    configure_logging()
    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
