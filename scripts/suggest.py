#!/usr/bin/env python3
"""
Script to run the suggestion pipeline for one message against the live catalog.

Usage:
    python scripts/suggest.py "I need a phone for photography under $500"
    python scripts/suggest.py "show me laptops" --budget 500-1000
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shopping_assistant.core.context import extract_context
from shopping_assistant.core.suggestions import build_suggestion_report, default_mapping
from shopping_assistant.integrations.catalog import get_catalog_provider


async def main(message: str, budget: str | None = None) -> None:
    """Print context and suggestions for a message."""
    context = extract_context(message)
    if budget:
        context.budget_range = budget

    print(f"Message: {message}")
    print("-" * 50)
    print(f"Intent:   {context.user_intent.value}")
    print(f"Stage:    {context.conversation_stage.value}")
    print(f"Keywords: {', '.join(context.keywords) or '-'}")
    print(f"Budget:   {context.budget_range or '-'}")
    print("-" * 50)

    catalog = get_catalog_provider()
    try:
        report = await build_suggestion_report(context, default_mapping(), catalog, message=message)
    finally:
        await catalog.close()

    if not report.suggestions:
        print("No suggestions.")
    for i, suggestion in enumerate(report.suggestions, 1):
        product = suggestion.product
        print(
            f"{i}. {product.title} (${product.price:.2f}, rating {product.rating}) "
            f"[{suggestion.type.value}, {suggestion.confidence:.2f}] - {suggestion.reason}"
        )

    if report.errors:
        print("-" * 50)
        print("Lookup errors:")
        for error in report.errors:
            print(f"   {error}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Suggest products for a message")
    parser.add_argument("message", help="User message")
    parser.add_argument(
        "--budget",
        "-b",
        help="Budget override, e.g. 'under-100' or '300-600'",
        default=None,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    asyncio.run(main(args.message, args.budget))
