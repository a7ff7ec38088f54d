"""Moderation router -- content checks, configuration, and user history.

Prefix: ``/api/moderation``
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from desahogo.errors import ConfigValidationError
from desahogo.moderation.moderator import ContentModerator
from web.backend.app.models.api import (
    ConfigUpdateRequest,
    ModerateRequest,
    ModerationResultResponse,
    SystemStatsResponse,
    UserHistoryResponse,
)

router = APIRouter(prefix="/api/moderation", tags=["moderation"])


def get_moderator(request: Request) -> ContentModerator:
    """Return the moderator built at application startup."""
    return request.app.state.moderator


# ---------------------------------------------------------------------------
# Content checks
# ---------------------------------------------------------------------------


@router.post(
    "/check",
    response_model=ModerationResultResponse,
    summary="Moderate a piece of content",
)
async def check_content(body: ModerateRequest, moderator: ContentModerator = Depends(get_moderator)):
    """Run every detector over the content and return the verdict."""
    result = await moderator.moderate_content(body.content, body.user_id, body.content_type)
    return ModerationResultResponse(**result.to_dict())


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@router.get("/config", summary="Current moderation configuration")
async def get_config(moderator: ContentModerator = Depends(get_moderator)):
    return moderator.get_config().model_dump()


@router.patch("/config", summary="Update moderation configuration")
async def update_config(body: ConfigUpdateRequest, moderator: ContentModerator = Depends(get_moderator)):
    """Apply a partial update. Out-of-range thresholds are rejected."""
    try:
        cfg = moderator.update_config(body.model_dump(exclude_none=True))
    except ConfigValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors or str(e))
    return cfg.model_dump()


# ---------------------------------------------------------------------------
# History and stats
# ---------------------------------------------------------------------------


@router.get(
    "/users/{user_id}/history",
    response_model=UserHistoryResponse,
    summary="Moderation history for a user",
)
async def get_user_history(user_id: str, moderator: ContentModerator = Depends(get_moderator)):
    history = moderator.get_user_history(user_id)
    if history is None:
        raise HTTPException(status_code=404, detail=f"No history for user {user_id}")
    return UserHistoryResponse(**history.to_dict())


@router.delete(
    "/users/{user_id}/history",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Forget a user's moderation history",
)
async def clear_user_history(user_id: str, moderator: ContentModerator = Depends(get_moderator)):
    moderator.clear_user_history(user_id)


@router.get("/stats", response_model=SystemStatsResponse, summary="System-wide counters")
async def get_stats(moderator: ContentModerator = Depends(get_moderator)):
    stats = moderator.get_system_stats()
    return SystemStatsResponse(
        total_users=stats.total_users,
        total_flags=stats.total_flags,
        flagged_users=stats.flagged_users,
        flagged_user_percentage=stats.flagged_user_percentage,
        config_version=stats.config_version,
    )
