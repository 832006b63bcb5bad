#!/usr/bin/env python3
"""
Script to create the guideline and conversation tables.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --seed
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shopping_assistant.config import settings
from shopping_assistant.data.loaders.guideline_loader import load_guidelines
from shopping_assistant.db.models import Base
from shopping_assistant.db.sqlite import db


async def main(seed: bool = False) -> None:
    """Create tables and optionally load the bundled guidelines."""
    print(f"Database: {db.url}")
    print("-" * 50)

    try:
        await db.init()
        for table in Base.metadata.sorted_tables:
            print(f"✅ Table ready: {table.name}")

        if seed:
            stats = await load_guidelines(settings.guidelines_file)
            print(f"✅ Seeded {stats['created']} guidelines ({stats['skipped']} already present)")
    finally:
        await db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create assistant database tables")
    parser.add_argument(
        "--seed",
        action="store_true",
        help=f"Also load guidelines from {settings.guidelines_file}",
    )

    args = parser.parse_args()
    asyncio.run(main(args.seed))
