"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status

from foodshare.api.models import (
    CommentRequest,
    ProfileUpdateRequest,
    PublishRequest,
)
from foodshare.app_logging import configure_logging
from foodshare.config import parse_bearer_token
from foodshare.containers import AppContainer
from foodshare.domain.communities import CommunityView
from foodshare.domain.drafts import Draft
from foodshare.domain.engagement import AUTH_REQUIRED, EngagementNotice
from foodshare.domain.errors import CompositionError, GatewayError, ProfileError
from foodshare.domain.meals import Food
from foodshare.domain.notifications import Notification
from foodshare.domain.posts import Comment, Post, format_time_ago
from foodshare.domain.profiles import Viewer
from foodshare.services.composer import MealBuilder


def _container(request: Request) -> AppContainer:
    return request.app.state.container


async def current_viewer(
    request: Request, authorization: str | None = Header(default=None)
) -> Viewer | None:
    """Resolve the viewer from a bearer token, None when anonymous."""
    token = parse_bearer_token(authorization)
    return await _container(request).viewer_service.resolve(token)


async def require_viewer(
    viewer: Viewer | None = Depends(current_viewer),
) -> Viewer:
    """Reject anonymous requests."""
    if viewer is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Please log in"
        )
    return viewer


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.feed_service.start()
        except Exception:
            logger.exception("Failed to start the feed listener")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/feed")
    async def feed(request: Request) -> dict[str, object]:
        """Return the home feed, newest first."""
        feed_service = _container(request).feed_service
        if not feed_service.is_subscribed:
            await feed_service.refresh()
        return {
            "posts": [_serialize_post(post) for post in feed_service.posts],
            "is_loading": feed_service.is_loading,
        }

    @app.get("/foods")
    async def foods(q: str = "") -> dict[str, object]:
        """Search the meal builder food catalogue."""
        return {"foods": [asdict(food) for food in MealBuilder().search(q)]}

    @app.post("/posts", status_code=status.HTTP_201_CREATED)
    async def publish_post(
        payload: PublishRequest,
        request: Request,
        viewer: Viewer = Depends(require_viewer),
    ) -> dict[str, object]:
        """Publish the composed post."""
        meal = MealBuilder()
        for item in payload.items or []:
            meal.add_food(Food(item.name, item.calories), item.servings)
        try:
            post = await _container(request).composer_service.publish(
                viewer, payload.draft, meal
            )
        except CompositionError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        except GatewayError as exc:
            logger.exception("Failed to publish post")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to share post.",
            ) from exc
        return {"post": _serialize_post(post)}

    @app.get("/posts/{post_id}")
    async def post_detail(
        post_id: str,
        request: Request,
        viewer: Viewer | None = Depends(current_viewer),
    ) -> dict[str, object]:
        """Return a post with engagement for the viewer."""
        state_container = _container(request)
        aggregate = await state_container.post_loader.load(post_id, viewer)
        if aggregate.post is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        state_container.engagement_service.apply_aggregate(
            post_id, viewer, aggregate
        )
        return {
            "post": _serialize_post(aggregate.post),
            "engagement": _engagement(state_container, post_id, viewer),
        }

    @app.post("/posts/{post_id}/like")
    async def toggle_like(
        post_id: str,
        request: Request,
        viewer: Viewer | None = Depends(current_viewer),
    ) -> dict[str, object]:
        """Toggle the viewer's like."""
        state_container = _container(request)
        notice = await state_container.engagement_service.toggle_like(post_id, viewer)
        return _engagement_response(state_container, post_id, viewer, notice)

    @app.post("/posts/{post_id}/comments")
    async def add_comment(
        post_id: str,
        payload: CommentRequest,
        request: Request,
        viewer: Viewer | None = Depends(current_viewer),
    ) -> dict[str, object]:
        """Submit a comment."""
        state_container = _container(request)
        notice = await state_container.engagement_service.submit_comment(
            post_id, viewer, payload.text
        )
        return _engagement_response(state_container, post_id, viewer, notice)

    @app.get("/draft")
    async def load_draft(request: Request) -> dict[str, object]:
        """Return the saved composition draft."""
        draft = _container(request).draft_service.load_draft()
        return draft.model_dump(by_alias=True, mode="json")

    @app.put("/draft")
    async def save_draft(draft: Draft, request: Request) -> dict[str, object]:
        """Overwrite the saved composition draft."""
        saved = _container(request).draft_service.save_draft(draft)
        return {"saved": saved}

    @app.delete("/draft", status_code=status.HTTP_204_NO_CONTENT)
    async def clear_draft(request: Request) -> None:
        """Discard the saved composition draft."""
        _container(request).draft_service.clear_draft()

    @app.get("/notifications")
    async def notifications(
        request: Request,
        unread_only: bool = False,
        viewer: Viewer = Depends(require_viewer),
    ) -> dict[str, object]:
        """Return the viewer's notifications."""
        service = _container(request).notification_service
        return {
            "notifications": [
                _serialize_notification(notification)
                for notification in service.list_notifications(
                    viewer.id, unread_only=unread_only
                )
            ],
            "unread_count": service.unread_count(viewer.id),
        }

    @app.post("/notifications/read-all")
    async def mark_all_read(
        request: Request, viewer: Viewer = Depends(require_viewer)
    ) -> dict[str, object]:
        """Mark every notification read."""
        service = _container(request).notification_service
        service.mark_all_as_read(viewer.id)
        return {"unread_count": service.unread_count(viewer.id)}

    @app.post("/notifications/{notification_id}/read")
    async def mark_read(
        notification_id: int,
        request: Request,
        viewer: Viewer = Depends(require_viewer),
    ) -> dict[str, object]:
        """Mark one notification read."""
        service = _container(request).notification_service
        if not service.mark_as_read(viewer.id, notification_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"unread_count": service.unread_count(viewer.id)}

    @app.get("/profile")
    async def profile(
        request: Request, viewer: Viewer = Depends(require_viewer)
    ) -> dict[str, object]:
        """Return the viewer's profile and own posts."""
        try:
            page = await _container(request).profile_service.load(viewer)
        except GatewayError as exc:
            logger.exception("Failed to load profile of %s", viewer.id)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to load profile",
            ) from exc
        return {
            "profile": asdict(page.profile),
            "posts": [_serialize_post(post) for post in page.posts],
        }

    @app.patch("/profile")
    async def update_profile(
        payload: ProfileUpdateRequest,
        request: Request,
        viewer: Viewer = Depends(require_viewer),
    ) -> dict[str, object]:
        """Change the viewer's display name."""
        try:
            updated = await _container(request).profile_service.update_name(
                viewer, payload.name
            )
        except ProfileError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        except GatewayError as exc:
            logger.exception("Failed to update profile of %s", viewer.id)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to update profile",
            ) from exc
        return {"profile": asdict(updated)}

    @app.get("/communities")
    async def communities(
        request: Request, viewer: Viewer | None = Depends(current_viewer)
    ) -> dict[str, object]:
        """Return the community directory."""
        listings = await _container(request).community_service.list_communities(
            viewer
        )
        return {
            "communities": [
                {
                    "community": asdict(listing.community),
                    "member_count": listing.member_count,
                    "is_member": listing.is_member,
                }
                for listing in listings
            ],
            "joined": [
                listing.community.id for listing in listings if listing.is_member
            ],
        }

    @app.get("/communities/{community_id}")
    async def community_detail(
        community_id: int,
        request: Request,
        viewer: Viewer | None = Depends(current_viewer),
    ) -> dict[str, object]:
        """Return a community page."""
        view = await _container(request).community_service.load(community_id, viewer)
        if view is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Community Not Found"
            )
        return _serialize_community(view)

    @app.post("/communities/{community_id}/membership")
    async def toggle_membership(
        community_id: int,
        request: Request,
        viewer: Viewer | None = Depends(current_viewer),
    ) -> dict[str, object]:
        """Join or leave a community."""
        service = _container(request).community_service
        notice = await service.toggle_membership(community_id, viewer)
        _raise_for_auth(notice)
        view = service.views.get((community_id, viewer.id)) if viewer else None
        body: dict[str, object] = {"notice": _serialize_notice(notice)}
        if view is not None:
            body.update(_serialize_community(view))
        return body

    return app


def _raise_for_auth(notice: EngagementNotice | None) -> None:
    if notice is not None and notice.kind == AUTH_REQUIRED:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=notice.text
        )


def _engagement(
    container: AppContainer, post_id: str, viewer: Viewer | None
) -> dict[str, object]:
    snapshot = container.engagement_service.snapshot(post_id, viewer)
    comments = snapshot.pop("comments")
    snapshot["comments"] = [_serialize_comment(comment) for comment in comments]
    return snapshot


def _engagement_response(
    container: AppContainer,
    post_id: str,
    viewer: Viewer | None,
    notice: EngagementNotice | None,
) -> dict[str, object]:
    _raise_for_auth(notice)
    return {
        "notice": _serialize_notice(notice),
        "engagement": _engagement(container, post_id, viewer),
    }


def _serialize_notice(notice: EngagementNotice | None) -> dict[str, str] | None:
    if notice is None:
        return None
    return {"kind": notice.kind, "text": notice.text}


def _serialize_post(post: Post) -> dict[str, object]:
    return {
        "id": post.id,
        "user_id": post.user_id,
        "title": post.title,
        "caption": post.caption,
        "image_url": post.image_url,
        "calories": post.calories,
        "tags": post.tags,
        "mealtype": str(post.meal_type),
        "community_id": post.community_id,
        "created_at": post.created_at.isoformat(),
        "time_ago": format_time_ago(post.created_at),
        "user": asdict(post.author) if post.author else None,
    }


def _serialize_comment(comment: Comment) -> dict[str, object]:
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "user_id": comment.user_id,
        "content": comment.content,
        "created_at": comment.created_at.isoformat(),
        "time_ago": format_time_ago(comment.created_at),
        "user": asdict(comment.author) if comment.author else None,
    }


def _serialize_notification(notification: Notification) -> dict[str, object]:
    return {
        "id": notification.id,
        "type": str(notification.type),
        "message": notification.message,
        "read": notification.read,
        "created_at": notification.created_at.isoformat(),
        "time_ago": format_time_ago(notification.created_at),
        "post": asdict(notification.post) if notification.post else None,
        "user": asdict(notification.user) if notification.user else None,
    }


def _serialize_community(view: CommunityView) -> dict[str, object]:
    return {
        "community": asdict(view.community),
        "posts": [_serialize_post(post) for post in view.posts],
        "is_member": view.is_member,
        "member_count": view.member_count,
    }
