"""Pydantic models for API request/response serialization.

These models mirror the desahogo dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Moderation models
# ---------------------------------------------------------------------------


class ModerateRequest(BaseModel):
    content: str
    user_id: str
    content_type: Literal["story", "comment", "message", "profile"] = "story"


class ModerationFlagResponse(BaseModel):
    """Mirrors desahogo.moderation.models.ModerationFlag."""

    type: str
    confidence: float
    evidence: list[str] = Field(default_factory=list)
    description: str = ""


class ModerationResultResponse(BaseModel):
    """Mirrors desahogo.moderation.models.ModerationResult."""

    is_approved: bool
    confidence: float
    flags: list[ModerationFlagResponse] = Field(default_factory=list)
    severity: str
    suggested_action: str
    explanation: str = ""
    auto_moderated: bool = False


class UserHistoryResponse(BaseModel):
    """Mirrors desahogo.moderation.models.UserModerationHistory."""

    user_id: str
    recent_content: list[str] = Field(default_factory=list)
    recent_spam_flags: int = 0
    total_flags: int = 0
    last_flagged_at: Optional[str] = None
    warning_count: int = 0
    suspension_count: int = 0


class SystemStatsResponse(BaseModel):
    total_users: int
    total_flags: int
    flagged_users: int
    flagged_user_percentage: float
    config_version: str


class ConfigUpdateRequest(BaseModel):
    """Partial config update; nested threshold tables may be partial."""

    enabled: Optional[bool] = None
    auto_moderation_enabled: Optional[bool] = None
    strict_mode: Optional[bool] = None
    crisis_detection_enabled: Optional[bool] = None
    allow_anonymous: Optional[bool] = None
    flag_thresholds: Optional[dict[str, float]] = None
    action_thresholds: Optional[dict[str, float]] = None


# ---------------------------------------------------------------------------
# Crisis models
# ---------------------------------------------------------------------------


class CrisisAnalyzeRequest(BaseModel):
    message: str


class CrisisAnalysisResponse(BaseModel):
    """Mirrors desahogo.crisis.analyzer.CrisisAnalysis."""

    severity: str
    keywords: list[str] = Field(default_factory=list)
    requires_alert: bool = False
    recommended_action: str = ""


class CrisisAlertRequest(BaseModel):
    user_id: str
    username: str
    message: str


class CrisisAlertResponse(BaseModel):
    """Mirrors desahogo.crisis.analyzer.CrisisAlert."""

    id: str
    user_id: str
    username: str
    message: str
    timestamp: str
    severity: str
    status: str
    keywords: list[str] = Field(default_factory=list)
    recommended_action: str = ""


class CrisisResourceResponse(BaseModel):
    name: str
    phone: str
    available: str
    description: str


class CrisisResourcesResponse(BaseModel):
    emergency: list[CrisisResourceResponse] = Field(default_factory=list)
    support: list[CrisisResourceResponse] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    detail: Any
