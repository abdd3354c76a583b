"""Protean Engine runner for the storefront domain.

In production (``PROTEAN_ENV=production``) events are processed
asynchronously: the Engine feeds order events to the stock restock handler,
the order summary projector and the fan-out handler.

Usage:
    python src/server.py
"""

import argparse
import asyncio

from protean.server.engine import Engine
from storefront.domain import storefront
from storefront.utils.logging import configure_logging


async def run():
    storefront.init()
    engine = Engine(storefront)
    await asyncio.gather(engine.run())


def main():
    parser = argparse.ArgumentParser(description="Storefront Engine runner")
    parser.add_argument("--log-dir", help="Also write rotating log files to this directory")
    args = parser.parse_args()

    configure_logging(log_dir=args.log_dir)
    asyncio.run(run())


if __name__ == "__main__":
    main()
