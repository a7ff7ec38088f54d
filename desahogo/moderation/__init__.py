"""Rule-based content moderation.

- Lexicon: keyword tiers and regex patterns, loadable from YAML
- Detectors: independent analyzers producing typed, scored flags
- Moderator: aggregates flags into a verdict and tracks per-user history
"""

from desahogo.moderation.config import ModerationConfig
from desahogo.moderation.moderator import ContentModerator
from desahogo.moderation.models import (
    ContentType,
    FlagType,
    ModerationAction,
    ModerationFlag,
    ModerationResult,
    Severity,
)

__all__ = [
    "ContentModerator",
    "ContentType",
    "FlagType",
    "ModerationAction",
    "ModerationConfig",
    "ModerationFlag",
    "ModerationResult",
    "Severity",
]
