"""Supabase Realtime subscription to inserted posts."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from supabase import AsyncClient

from foodshare.domain.errors import GatewayError

logger = logging.getLogger(__name__)


def extract_record(payload: dict[str, Any]) -> dict[str, object] | None:
    """Return the inserted row carried by a postgres_changes payload."""
    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("record"), dict):
        return data["record"]
    for key in ("new", "record"):
        if isinstance(payload.get(key), dict):
            return payload[key]
    return None


@dataclass
class SupabasePostInsertChannel:
    """Realtime channel delivering `posts` INSERT events."""

    client: AsyncClient
    name: str = "posts"
    _channel: Any = field(default=None, init=False, repr=False)

    async def subscribe(self, on_insert: Callable[[dict[str, object]], None]) -> None:
        """Subscribe to inserts on the public `posts` table."""
        if self._channel is not None:
            return

        def handle(payload: dict[str, Any]) -> None:
            record = extract_record(payload)
            if record is None:
                logger.warning("Ignoring posts event without a record")
                return
            on_insert(record)

        channel = self.client.channel(self.name)
        channel.on_postgres_changes(
            "INSERT", schema="public", table="posts", callback=handle
        )
        await channel.subscribe()
        self._channel = channel
        logger.info("Subscribed to %s inserts", self.name)

    async def unsubscribe(self) -> None:
        """Remove the channel from the client."""
        if self._channel is None:
            return
        try:
            await self.client.remove_channel(self._channel)
        except Exception as exc:
            raise GatewayError(f"Failed to remove channel {self.name}") from exc
        self._channel = None
        logger.info("Unsubscribed from %s inserts", self.name)
