#!/usr/bin/env python3
"""
Script to load guidelines into the database.

Usage:
    python scripts/seed_guidelines.py
    python scripts/seed_guidelines.py path/to/guidelines.json --replace
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shopping_assistant.config import settings
from shopping_assistant.data.loaders.guideline_loader import load_guidelines
from shopping_assistant.db.sqlite import db


async def main(file_path: str | None = None, replace: bool = False) -> None:
    """Load guidelines from file."""
    file_path = Path(file_path) if file_path else settings.guidelines_file

    if not file_path.exists():
        print(f"Error: File not found: {file_path}")
        sys.exit(1)

    # Initialize database
    await db.init()

    print(f"Loading guidelines from: {file_path}")
    print("-" * 50)

    try:
        stats = await load_guidelines(file_path, replace=replace)

        print("✅ Successfully loaded guidelines!")
        print(f"   Total in file: {stats['total']}")
        print(f"   Created: {stats['created']}")
        print(f"   Updated: {stats['updated']}")
        print(f"   Skipped: {stats['skipped']}")

    except Exception as e:
        print(f"❌ Error loading guidelines: {e}")
        raise
    finally:
        await db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load guidelines into database")
    parser.add_argument(
        "file",
        nargs="?",
        help="Path to guideline JSON file (default: data/guidelines.json)",
        default=None,
    )
    parser.add_argument(
        "--replace",
        action="store_true",
        help="Overwrite stored guidelines with the same name",
    )

    args = parser.parse_args()
    asyncio.run(main(args.file, args.replace))
