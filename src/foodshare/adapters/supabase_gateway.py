"""Shared helpers for Supabase adapters."""

from typing import Any

import httpx
from postgrest.exceptions import APIError

from foodshare.domain.errors import GatewayError


async def execute(query: Any, action: str) -> Any:  # noqa: ANN401
    """Execute a PostgREST query, translating backend failures."""
    try:
        return await query.execute()
    except (APIError, httpx.HTTPError) as exc:
        raise GatewayError(f"Supabase {action} failed") from exc
