"""
Shopping assistant - console entry point.

Type a message to see the detected context, the applicable guidelines and
the product suggestions for each turn. Commands: /new starts a new
conversation, /quit exits.
"""

import asyncio
import logging
import sys

from shopping_assistant.config import settings
from shopping_assistant.core.assistant import TurnResult, get_assistant
from shopping_assistant.core.errors import InputValidationError, UpstreamUnavailable
from shopping_assistant.db.sqlite import db


# Fix for Windows asyncio
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def on_startup() -> None:
    """Initialize services on startup."""
    logger.info("Starting shopping assistant...")

    await db.init()
    logger.info("Database initialized")


async def on_shutdown() -> None:
    """Cleanup on shutdown."""
    logger.info("Shutting down shopping assistant...")

    await get_assistant().close()
    await db.close()

    logger.info("Cleanup complete")


def render_turn(result: TurnResult) -> str:
    context = result.context
    lines = [
        f"[{context.conversation_stage.value}] intent={context.user_intent.value} "
        f"budget={context.budget_range or '-'} readiness={result.purchase_readiness}",
    ]
    for guideline in result.guidelines[:3]:
        lines.append(f"  guideline ({guideline.priority}): {guideline.name}")
    for suggestion in result.suggestions:
        product = suggestion.product
        lines.append(
            f"  - {product.title} ${product.price:.2f} "
            f"({suggestion.confidence:.2f}) {suggestion.reason}"
        )
    if not result.suggestions:
        lines.append("  (no suggestions)")
    return "\n".join(lines)


async def main() -> None:
    """Run the console chat loop."""
    await on_startup()
    assistant = get_assistant()
    conversation_id = None

    try:
        while True:
            try:
                message = await asyncio.to_thread(input, "you> ")
            except EOFError:
                break

            command = message.strip().lower()
            if command in ("/quit", "/exit"):
                break
            if command == "/new":
                conversation_id = None
                print("Started a new conversation.")
                continue

            try:
                result = await assistant.process_message(message, conversation_id)
            except InputValidationError as e:
                print(f"Invalid message: {e}")
                continue
            except UpstreamUnavailable as e:
                print(f"Service unavailable ({e.service}), please try again.")
                continue

            conversation_id = result.conversation_id
            print(render_turn(result))
    finally:
        await on_shutdown()


if __name__ == "__main__":
    asyncio.run(main())
