"""
Offline console demo — runs inbound messages through the real pipeline
without any API keys.

Identity resolution, context synthesis, and response shaping are the real
implementations; the store is in-memory and the generation backend replays
canned replies. No network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario returning
    python console_demo.py --scenario booking
"""

import argparse
import asyncio
from typing import Optional, Sequence

from leadsync.agents.reply_agent import ReplyAgent
from leadsync.config import settings
from leadsync.schemas.lead_schema import Channel
from leadsync.schemas.response_schema import ConversationTurn, GenerationResult, ReplyResult
from leadsync.store.memory import create_memory_store

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

KNOWLEDGE = [
    {"content": "Plans start at $99/month and include WhatsApp and website chat."},
    {"content": "It works by connecting every channel to one shared customer memory."},
]


class ScriptedBackend:
    """Generation backend that answers from a small keyword table."""

    REPLIES: list[tuple[str, str]] = [
        ("reschedule", "No problem, I can move your booking. Which day suits you?\n→ BUTTON: Pick a day"),
        ("cancel", "I can cancel that for you. Just confirm below."),
        ("cost", "Plans start at $99/month with every channel included."),
        ("price", "Plans start at $99/month with every channel included."),
        ("work", "Every channel shares one memory, so you never repeat yourself."),
        ("thank", "Happy to help! Want to see it live?"),
    ]
    DEFAULT = "Hi! How can I help you today?"

    async def complete(
        self, system_prompt: str, turns: Sequence[ConversationTurn]
    ) -> GenerationResult:
        message = turns[-1].content.lower() if turns else ""
        for keyword, reply in self.REPLIES:
            if keyword in message:
                return GenerationResult(text=reply, output_tokens=len(reply.split()), elapsed_ms=1)
        return GenerationResult(
            text=self.DEFAULT, output_tokens=len(self.DEFAULT.split()), elapsed_ms=1
        )


class ConsoleSession:
    """Plays scripted customer messages through the ReplyAgent."""

    # Pre-scripted scenarios for --scenario flag: (phone, channel, message)
    SCENARIOS: dict[str, list[tuple[str, Channel, str]]] = {
        "new": [
            ("+1 (555) 123-4567", Channel.WHATSAPP, "hi"),
            ("15551234567", Channel.WHATSAPP, "How does it work?"),
            ("15551234567", Channel.WHATSAPP, "What does it cost?"),
            ("15551234567", Channel.WHATSAPP, "thanks"),
        ],
        "returning": [
            ("919876543210", Channel.WHATSAPP, "Hello again"),
            ("919876543210", Channel.WHATSAPP, "Is there office property in Bandra under budget?"),
        ],
        "booking": [
            ("+44 20 7946 0958", Channel.WHATSAPP, "Can I reschedule my demo?"),
            ("442079460958", Channel.WHATSAPP, "Actually please cancel it"),
            ("442079460958", Channel.WHATSAPP, "What time was it again?"),
        ],
    }

    def __init__(self, brand: Optional[str] = None) -> None:
        self.brand = brand or settings.brand.default_brand
        self.store = create_memory_store(KNOWLEDGE)
        self.agent = ReplyAgent(self.store, ScriptedBackend())

    def agent_say(self, result: ReplyResult) -> None:
        labels = ", ".join(result.response.button_labels) or "-"
        print(f"{GREEN}{BOLD}[Assistant]{RESET} {GREEN}{result.response.text}{RESET}")
        print(f"{YELLOW}  [buttons: {labels}]{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    async def _seed(self, scenario: str) -> None:
        """Pre-load web-channel history the scenario depends on."""
        if scenario == "returning":
            web = {
                "web": {
                    "conversation_summary": "Asked about office space near BKC",
                    "user_inputs": ["office space near bkc"],
                },
                "budget": "2 lakh/month",
            }
            await self._seed_lead("+91 98765 43210", "Priya", web)
        elif scenario == "booking":
            booking = {"booking_date": "2025-03-18", "booking_time": "11:00", "booking_status": "confirmed"}
            await self._seed_lead("+44 20 7946 0958", "Oliver", booking)

    async def _seed_lead(self, phone: str, name: str, unified: dict) -> None:
        resolver = self.agent.resolver
        lead = await resolver.resolve(phone, self.brand, Channel.WEB, {"name": name, "metadata": unified})
        self.system_log(f"Seeded web lead {lead.id} ({lead.normalized_phone})")

    async def run_scenario(self, scenario: str) -> None:
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  LEADSYNC - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Brand: {self.brand}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        await self._seed(scenario)
        for phone, channel, text in steps:
            print(f"\n{BLUE}[Customer {phone} via {channel.label}] {RESET}{text}")
            result = await self.agent.handle_message(phone, text, self.brand, channel)
            self.agent_say(result)
            ctx = result.context
            self.system_log(
                f"lead={ctx.lead_id[:8]} new={result.is_new_user} phase={ctx.phase.value} "
                f"rule={result.response.matched_rule} urgency={result.response.urgency.value}"
            )
            if ctx.previous_interests:
                self.system_log(f"interests: {ctx.previous_interests}")

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{DIM}  Leads stored: {self.store.leads.count()}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline lead pipeline demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default="new",
        help="Scripted scenario to play.",
    )
    parser.add_argument("--brand", default=None, help="Brand to resolve leads under.")
    args = parser.parse_args()
    asyncio.run(ConsoleSession(args.brand).run_scenario(args.scenario))


if __name__ == "__main__":
    main()
