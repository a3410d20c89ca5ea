#!/usr/bin/env python3
"""CLI script to manage the commercetools subscription that feeds /deltaSync.

Run ``create`` after deploying the incremental updater and ``delete`` before
undeploying it.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import orjson
import structlog

from catalog_sync.config import get_settings
from catalog_sync.container import build_container
from catalog_sync.logging_config import configure_logging

logger = structlog.get_logger()


def _print(value) -> None:
    print(orjson.dumps(value, option=orjson.OPT_INDENT_2).decode())


async def main(command: str) -> int:
    settings = get_settings()
    container = await build_container(settings)
    manager = container.subscriptions
    try:
        if command == "draft":
            _print(manager.draft())
        elif command == "show":
            subscription = await manager.get()
            if subscription is None:
                logger.info("Subscription not found", key=manager.key)
                return 1
            _print(subscription)
        elif command == "create":
            _print(await manager.create())
        elif command == "delete":
            deleted = await manager.delete()
            logger.info("Subscription cleanup finished", key=manager.key, deleted=deleted)
    finally:
        await container.aclose()
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Manage the product change subscription")
    parser.add_argument("command", choices=["draft", "show", "create", "delete"])
    args = parser.parse_args()

    configure_logging(get_settings())
    sys.exit(asyncio.run(main(args.command)))
