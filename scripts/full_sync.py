#!/usr/bin/env python3
"""CLI script to run a full catalog sync from commercetools to Google Cloud Retail."""

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


async def main(product_id: str | None) -> int:
    """Run a full sync, or a single-product upsert when an id is given."""
    settings = get_settings()
    container = await build_container(settings)
    try:
        if product_id:
            result = await container.product_sync.sync_product(product_id)
        else:
            result = (await container.full_sync.run_full_sync()).model_dump(mode="json")
    finally:
        await container.aclose()

    print(orjson.dumps(result, option=orjson.OPT_INDENT_2).decode())
    return 1 if result.get("error_count") else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Sync the product catalog to Google Cloud Retail")
    parser.add_argument("--product-id", help="Sync only this product")
    args = parser.parse_args()

    configure_logging(get_settings())
    sys.exit(asyncio.run(main(args.product_id)))
