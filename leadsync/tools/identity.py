"""
Lead identity resolution. Get-or-create keyed by normalized phone and brand.

The two channels format one number differently (bare digits from WhatsApp,
``+cc (area) nnn-nnnn`` from the web form). Lexical normalization unifies
them, so both resolve to the same Lead row.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from leadsync.errors import InvalidIdentity
from leadsync.logging_context import get_request_logger
from leadsync.schemas.lead_schema import Channel, Lead
from leadsync.store.base import LeadRepository
from leadsync.utils import normalize_phone

logger = get_request_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IdentityResolver:
    """Resolves raw phones to durable Lead rows without ever duplicating one."""

    def __init__(
        self,
        leads: LeadRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._leads = leads
        self._clock = clock

    async def resolve(
        self,
        raw_phone: str,
        brand: str,
        channel: Channel = Channel.WHATSAPP,
        hints: Optional[dict[str, Any]] = None,
    ) -> Lead:
        """Return the Lead for this phone and brand, creating it on first contact.

        Raises:
            InvalidIdentity: If the phone normalizes to an empty key.
        """
        lead, _ = await self.resolve_with_status(raw_phone, brand, channel, hints)
        return lead

    async def resolve_with_status(
        self,
        raw_phone: str,
        brand: str,
        channel: Channel = Channel.WHATSAPP,
        hints: Optional[dict[str, Any]] = None,
    ) -> tuple[Lead, bool]:
        """Like ``resolve`` but also report whether this call created the Lead."""
        key = normalize_phone(raw_phone)
        if not key:
            raise InvalidIdentity(raw_phone)

        now = self._clock()
        existing = await self._leads.find_by_normalized_phone(key, brand)
        if existing is not None:
            logger.info(
                "Found existing lead: %s for phone %s (normalized: %s)",
                existing.id, raw_phone, key,
            )
            updated = await self._leads.touch_last_interaction(existing.id, channel, now)
            return updated, False

        candidate = self._new_lead(raw_phone, key, brand, channel, now, hints or {})
        stored, created = await self._leads.insert_if_absent(candidate)
        if not created:
            # Another request won the first-contact race for this key.
            logger.info("Lead %s created concurrently for %s, reusing it", stored.id, key)
            stored = await self._leads.touch_last_interaction(stored.id, channel, now)
            return stored, False

        logger.info(
            "Created new lead: %s for phone %s (normalized: %s)", stored.id, raw_phone, key
        )
        return stored, True

    @staticmethod
    def _new_lead(
        raw_phone: str,
        key: str,
        brand: str,
        channel: Channel,
        now: datetime,
        hints: dict[str, Any],
    ) -> Lead:
        return Lead(
            id=str(uuid.uuid4()),
            raw_phone=raw_phone,
            normalized_phone=key,
            brand=brand,
            display_name=hints.get("profile_name") or hints.get("name"),
            email=hints.get("email"),
            first_touchpoint=channel,
            last_touchpoint=channel,
            created_at=now,
            last_interaction_at=now,
            unified_context=dict(hints.get("metadata") or {}),
        )
