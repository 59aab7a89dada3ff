"""
Lead pipeline entry point.

Chats with the live generation backend from the terminal, or plays the
offline console demo.

Usage:
    Live chat:    python main.py chat --phone "+91 9876543210"
    Console mode: python main.py console
"""

import argparse
import asyncio
import logging
import sys

from leadsync.config import settings
from leadsync.errors import BackendError, InvalidIdentity
from leadsync.schemas.lead_schema import Channel

logger = logging.getLogger(__name__)


async def _chat(phone: str, brand: str, channel: Channel) -> None:
    """Interactive loop against the OpenAI backend (requires OPENAI_API_KEY)."""
    from leadsync.agents.reply_agent import ReplyAgent
    from leadsync.store.memory import create_memory_store
    from leadsync.tools.generation import OpenAIBackend

    agent = ReplyAgent(create_memory_store(), OpenAIBackend())
    logger.info("Starting live chat for %s (brand: %s)", phone, brand)
    print(f"Chatting as {phone} on {channel.label} ({brand}). Empty line to quit.")
    while True:
        message = input("> ").strip()
        if not message:
            break
        try:
            result = await agent.handle_message(phone, message, brand, channel)
        except (BackendError, InvalidIdentity) as exc:
            print(f"! {exc}")
            continue
        print(result.response.text)
        print(f"  [{', '.join(result.response.button_labels)}] phase={result.context.phase.value}")


def _run_console_mode(scenario: str) -> None:
    """Start the offline console demo (no API keys required)."""
    from console_demo import ConsoleSession

    asyncio.run(ConsoleSession().run_scenario(scenario))


def main(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(description="Omnichannel lead reply pipeline")
    sub = parser.add_subparsers(dest="command", required=True)

    chat = sub.add_parser("chat", help="Chat with the live generation backend.")
    chat.add_argument("--phone", required=True, help="Customer phone in any format.")
    chat.add_argument("--brand", default=settings.brand.default_brand)
    chat.add_argument(
        "--channel",
        choices=[c.value for c in Channel],
        default=settings.brand.default_channel,
    )

    console = sub.add_parser("console", help="Play an offline scripted scenario.")
    console.add_argument("--scenario", default="new")

    args = parser.parse_args(argv)
    if args.command == "console":
        _run_console_mode(args.scenario)
    else:
        asyncio.run(_chat(args.phone, args.brand, Channel(args.channel)))


if __name__ == "__main__":
    main(sys.argv[1:])
