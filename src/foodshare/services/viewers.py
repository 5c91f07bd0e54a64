"""Resolution of the authenticated viewer."""

import logging
from dataclasses import dataclass
from typing import Protocol

from foodshare.domain.errors import GatewayError
from foodshare.domain.profiles import IdentityUser, Profile, Viewer, initial_avatar
from foodshare.services.profiles import ProfileRepository

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """Black-box issuer of user identities."""

    async def get_user(self, access_token: str) -> IdentityUser | None:
        """Return the user for a session token, or None when unauthenticated."""


@dataclass
class ViewerService:
    """Turns a session token into a viewer with a display profile."""

    identity: IdentityProvider
    profiles: ProfileRepository

    async def resolve(self, access_token: str | None) -> Viewer | None:
        """Return the viewer for a token, or None when unauthenticated."""
        if not access_token:
            return None
        user = await self.identity.get_user(access_token)
        if user is None:
            return None
        try:
            profile = await self.profiles.get_profile(user.id)
        except GatewayError:
            logger.exception("Error fetching profile for %s", user.id)
            profile = None
        if profile is None and user.display_name:
            profile = Profile(
                id=user.id,
                name=user.display_name,
                username=f"user_{user.id[:8]}",
                avatar=initial_avatar(user.display_name),
            )
        return Viewer(id=user.id, email=user.email, profile=profile)
