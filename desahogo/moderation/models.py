"""Data models for the content moderation system."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

RECENT_CONTENT_LIMIT = 10


class FlagType(Enum):
    """Kind of risk signal a detector can raise."""

    SPAM = "spam"
    HARASSMENT = "harassment"
    HATE_SPEECH = "hate_speech"
    SELF_HARM = "self_harm"
    SUICIDE_IDEATION = "suicide_ideation"
    VIOLENCE = "violence"
    ADULT_CONTENT = "adult_content"
    MISINFORMATION = "misinformation"
    OFF_TOPIC = "off_topic"
    EXCESSIVE_CAPS = "excessive_caps"
    REPEATED_CONTENT = "repeated_content"
    FAKE_PROFILE = "fake_profile"
    SOLICITATION = "solicitation"


class Severity(Enum):
    """Ordinal risk level of a verdict."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __lt__(self, other: Severity) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: Severity) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank


_SEVERITY_ORDER = [Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]


class ModerationAction(Enum):
    """Disposition recommended for a piece of content."""

    APPROVE = "approve"
    FLAG_FOR_REVIEW = "flag_for_review"
    AUTO_HIDE = "auto_hide"
    AUTO_REMOVE = "auto_remove"
    ESCALATE_CRISIS = "escalate_crisis"
    REQUIRE_EDIT = "require_edit"
    WARN_USER = "warn_user"
    SUSPEND_USER = "suspend_user"


class ContentType(Enum):
    """Where the submitted text comes from."""

    STORY = "story"
    COMMENT = "comment"
    MESSAGE = "message"
    PROFILE = "profile"


@dataclass
class ModerationFlag:
    """A single typed risk signal with its confidence."""

    type: FlagType
    confidence: float
    evidence: list[str] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "confidence": self.confidence,
            "evidence": list(self.evidence),
            "description": self.description,
        }


@dataclass
class ModerationResult:
    """Verdict for one piece of content."""

    is_approved: bool
    confidence: float
    flags: list[ModerationFlag] = field(default_factory=list)
    severity: Severity = Severity.LOW
    suggested_action: ModerationAction = ModerationAction.APPROVE
    explanation: str = ""
    auto_moderated: bool = False

    @property
    def flag_types(self) -> set[FlagType]:
        return {f.type for f in self.flags}

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_approved": self.is_approved,
            "confidence": self.confidence,
            "flags": [f.to_dict() for f in self.flags],
            "severity": self.severity.value,
            "suggested_action": self.suggested_action.value,
            "explanation": self.explanation,
            "auto_moderated": self.auto_moderated,
        }


@dataclass
class UserModerationHistory:
    """Rolling moderation state for one user."""

    user_id: str
    recent_content: deque[str] = field(
        default_factory=lambda: deque(maxlen=RECENT_CONTENT_LIMIT)
    )
    recent_spam_flags: int = 0
    total_flags: int = 0
    last_flagged_at: Optional[datetime] = None
    warning_count: int = 0
    suspension_count: int = 0
    last_seen_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "recent_content": list(self.recent_content),
            "recent_spam_flags": self.recent_spam_flags,
            "total_flags": self.total_flags,
            "last_flagged_at": self.last_flagged_at.isoformat() if self.last_flagged_at else None,
            "warning_count": self.warning_count,
            "suspension_count": self.suspension_count,
        }


@dataclass
class SystemStats:
    """Aggregate counters across every tracked user."""

    total_users: int
    total_flags: int
    flagged_users: int
    flagged_user_percentage: float
    config_version: str
