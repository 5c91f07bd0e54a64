"""Supabase Auth identity provider."""

import logging
from dataclasses import dataclass

from supabase import AsyncClient, AuthError

from foodshare.domain.profiles import IdentityUser

logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityProvider:
    """Resolves session tokens through Supabase Auth."""

    client: AsyncClient

    async def get_user(self, access_token: str) -> IdentityUser | None:
        """Return the token's user, or None for an invalid or expired session."""
        try:
            response = await self.client.auth.get_user(access_token)
        except AuthError:
            logger.info("Rejected session token")
            return None
        user = response.user if response else None
        if user is None:
            return None
        metadata = user.user_metadata or {}
        display_name = metadata.get("name") or metadata.get("full_name")
        return IdentityUser(
            id=str(user.id),
            email=user.email,
            display_name=str(display_name) if display_name else None,
        )

