"""Domain models for user profiles and viewers."""

import base64
from dataclasses import dataclass

DEFAULT_AVATAR = "/default.png"

_AVATAR_COLORS = (
    "#F87171",
    "#FB923C",
    "#FBBF24",
    "#A3E635",
    "#34D399",
    "#22D3EE",
    "#60A5FA",
    "#A78BFA",
    "#F472B6",
)


@dataclass(frozen=True)
class Profile:
    """Public display profile of a user."""

    id: str
    name: str
    username: str
    avatar: str


@dataclass(frozen=True)
class IdentityUser:
    """User claims issued by the identity provider."""

    id: str
    email: str | None
    display_name: str | None


@dataclass(frozen=True)
class Viewer:
    """Authenticated user looking at the feed."""

    id: str
    email: str | None
    profile: Profile | None


def profile_from_row(row: dict[str, object]) -> Profile:
    """Build a profile from a `profiles` row, filling display fallbacks."""
    profile_id = str(row.get("id") or "")
    name = str(row.get("name") or "Anonymous")
    username = str(row.get("username") or f"user_{profile_id[:8]}")
    avatar = row.get("avatar") or row.get("avatar_url") or initial_avatar(name)
    return Profile(id=profile_id, name=name, username=username, avatar=str(avatar))


def initial_avatar(name: str) -> str:
    """Return an SVG data URI showing the first letter of a name."""
    if not name or not name.strip() or name == "Anonymous":
        return DEFAULT_AVATAR
    letter = name.strip()[0].upper()
    color = _AVATAR_COLORS[ord(letter) % len(_AVATAR_COLORS)]
    svg = (
        '<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">'
        f'<rect width="100" height="100" fill="{color}" />'
        '<text x="50" y="50" font-family="Arial" font-size="50" fill="white" '
        'text-anchor="middle" dominant-baseline="central">'
        f"{letter}</text></svg>"
    )
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"
