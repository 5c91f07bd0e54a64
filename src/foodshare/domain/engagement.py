"""Domain models for per-post engagement state."""

from dataclasses import dataclass, field
from enum import StrEnum

from foodshare.domain.posts import Comment, Post


class LikeState(StrEnum):
    """Like state of a (post, viewer) pair."""

    UNLIKED = "unliked"
    LIKED = "liked"
    LIKING = "liking"
    UNLIKING = "unliking"


IN_FLIGHT_STATES = frozenset({LikeState.LIKING, LikeState.UNLIKING})


@dataclass(frozen=True)
class PostAggregate:
    """A post with its engagement counts as seen by one viewer."""

    post: Post | None
    like_count: int = 0
    viewer_has_liked: bool = False
    comments: list[Comment] = field(default_factory=list)


@dataclass
class PostEngagement:
    """Mutable engagement view held for one (post, viewer) pair."""

    post_id: str
    like_state: LikeState = LikeState.UNLIKED
    like_count: int = 0
    comments: list[Comment] = field(default_factory=list)
    comment_count: int = 0
    comment_input: str = ""

    @property
    def viewer_has_liked(self) -> bool:
        return self.like_state in {LikeState.LIKED, LikeState.LIKING}

    @property
    def in_flight(self) -> bool:
        return self.like_state in IN_FLIGHT_STATES


@dataclass(frozen=True)
class EngagementNotice:
    """User-facing outcome of a rejected or failed engagement action."""

    kind: str
    text: str


AUTH_REQUIRED = "auth_required"
ERROR = "error"
