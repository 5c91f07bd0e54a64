"""Domain models for interest communities."""

from dataclasses import dataclass, field

from foodshare.domain.posts import Post


@dataclass(frozen=True)
class Community:
    """An interest-based community."""

    id: int
    title: str
    description: str
    emoji: str | None = None


@dataclass
class CommunityView:
    """Community page state for one viewer."""

    community: Community
    posts: list[Post] = field(default_factory=list)
    is_member: bool = False
    member_count: int = 0
    joining: bool = False


@dataclass(frozen=True)
class CommunityListing:
    """Entry of the community directory."""

    community: Community
    member_count: int
    is_member: bool
