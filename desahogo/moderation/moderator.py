"""Moderation aggregator: runs every detector and turns flags into a verdict.

A :class:`ContentModerator` owns its configuration, lexicon and per-user
history. Nothing is module-global; applications that want a shared instance
build one at startup and pass it around.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from desahogo.errors import InvalidContentTypeError
from desahogo.moderation import detectors
from desahogo.moderation.config import ModerationConfig, merge_config
from desahogo.moderation.history import HistoryStore
from desahogo.moderation.lexicon import DEFAULT_LEXICON, Lexicon
from desahogo.moderation.models import (
    ContentType,
    FlagType,
    ModerationAction,
    ModerationFlag,
    ModerationResult,
    Severity,
    SystemStats,
    UserModerationHistory,
)

logger = logging.getLogger(__name__)

FLAG_WEIGHTS: dict[FlagType, float] = {
    FlagType.SUICIDE_IDEATION: 3.0,
    FlagType.SELF_HARM: 2.5,
    FlagType.VIOLENCE: 2.0,
    FlagType.HARASSMENT: 1.8,
    FlagType.HATE_SPEECH: 1.8,
    FlagType.SPAM: 1.0,
    FlagType.ADULT_CONTENT: 1.5,
    FlagType.MISINFORMATION: 1.3,
    FlagType.OFF_TOPIC: 0.5,
    FlagType.EXCESSIVE_CAPS: 0.3,
    FlagType.REPEATED_CONTENT: 0.8,
    FlagType.FAKE_PROFILE: 1.2,
    FlagType.SOLICITATION: 1.0,
}

ACTION_EXPLANATIONS: dict[ModerationAction, str] = {
    ModerationAction.APPROVE: "Contenido aprobado con alertas menores",
    ModerationAction.FLAG_FOR_REVIEW: "Contenido marcado para revisión manual",
    ModerationAction.AUTO_HIDE: "Contenido ocultado automáticamente",
    ModerationAction.AUTO_REMOVE: "Contenido removido automáticamente",
    ModerationAction.ESCALATE_CRISIS: "Situación de crisis detectada - escalando a equipo de crisis",
    ModerationAction.REQUIRE_EDIT: "Contenido requiere edición antes de publicación",
    ModerationAction.WARN_USER: "Usuario será advertido sobre el contenido",
    ModerationAction.SUSPEND_USER: "Usuario será suspendido temporalmente",
}

CLEAN_EXPLANATION = "Contenido aprobado sin problemas detectados"
DISABLED_EXPLANATION = "Moderation disabled"
AUTO_MODERATION_CONFIDENCE = 0.8

_CRISIS_TYPES = {FlagType.SUICIDE_IDEATION, FlagType.SELF_HARM}
_CRITICAL_TYPES = {FlagType.SUICIDE_IDEATION, FlagType.SELF_HARM, FlagType.VIOLENCE}
_HIGH_TYPES = {FlagType.HARASSMENT, FlagType.HATE_SPEECH}


# ---------------------------------------------------------------------------
# Verdict arithmetic
# ---------------------------------------------------------------------------


def calculate_severity(flags: list[ModerationFlag]) -> Severity:
    """First matching rule wins: critical, high, medium, low."""
    if not flags:
        return Severity.LOW
    if any(f.type in _CRITICAL_TYPES and f.confidence > 0.7 for f in flags):
        return Severity.CRITICAL
    if any(f.type in _HIGH_TYPES and f.confidence > 0.6 for f in flags):
        return Severity.HIGH
    if any(f.confidence > 0.5 for f in flags):
        return Severity.MEDIUM
    return Severity.LOW


def determine_action(
    flags: list[ModerationFlag], severity: Severity, config: ModerationConfig
) -> ModerationAction:
    """Map flags and severity to a suggested action.

    Crisis flags always escalate, whatever their confidence. ``SUSPEND_USER``
    and ``REQUIRE_EDIT`` are never returned here.
    """
    if not flags:
        return ModerationAction.APPROVE

    if any(f.type in _CRISIS_TYPES for f in flags):
        return ModerationAction.ESCALATE_CRISIS

    thresholds = config.action_thresholds
    max_confidence = max(f.confidence for f in flags)

    if max_confidence >= thresholds.auto_remove:
        return ModerationAction.AUTO_REMOVE
    if max_confidence >= thresholds.auto_hide:
        return ModerationAction.AUTO_HIDE
    if max_confidence >= thresholds.require_review:
        return ModerationAction.FLAG_FOR_REVIEW
    if severity in (Severity.MEDIUM, Severity.HIGH):
        return ModerationAction.WARN_USER
    return ModerationAction.APPROVE


def calculate_confidence(flags: list[ModerationFlag]) -> float:
    """Weighted mean of flag confidences; 1.0 when there is nothing to flag."""
    if not flags:
        return 1.0
    total_weight = 0.0
    weighted_sum = 0.0
    for flag in flags:
        weight = FLAG_WEIGHTS.get(flag.type, 1.0)
        total_weight += weight
        weighted_sum += flag.confidence * weight
    return weighted_sum / total_weight if total_weight > 0 else 0.0


def generate_explanation(flags: list[ModerationFlag], action: ModerationAction) -> str:
    if not flags:
        return CLEAN_EXPLANATION
    descriptions = "; ".join(f.description for f in flags)
    return f"{descriptions}. Acción: {ACTION_EXPLANATIONS[action]}"


# ---------------------------------------------------------------------------
# Moderator
# ---------------------------------------------------------------------------


class ContentModerator:
    """Rule-based moderator with per-user history."""

    def __init__(
        self,
        config: ModerationConfig | None = None,
        lexicon: Lexicon | None = None,
        history: HistoryStore | None = None,
    ) -> None:
        self._config = config if config is not None else ModerationConfig()
        self.lexicon = lexicon if lexicon is not None else DEFAULT_LEXICON
        self._history = history if history is not None else HistoryStore()

    # -- detection -----------------------------------------------------------

    def _run_detector(self, name: str, fn: Callable[[], Any]) -> list[ModerationFlag]:
        """Run one detector; a failing detector contributes no flags."""
        try:
            produced = fn()
        except Exception:
            logger.exception("Detector %s failed; treating as no flag", name)
            return []
        if produced is None:
            return []
        if isinstance(produced, ModerationFlag):
            return [produced]
        return list(produced)

    def analyze(self, text: str, history: Optional[UserModerationHistory]) -> list[ModerationFlag]:
        """Run every detector and keep flags that clear their type threshold."""
        lexicon = self.lexicon
        config = self._config

        checks: list[tuple[str, Callable[[], Any]]] = []
        if config.crisis_detection_enabled:
            checks.append(("crisis", lambda: detectors.detect_crisis(text, lexicon)))
        checks.extend([
            ("spam", lambda: detectors.detect_spam(text, lexicon, history)),
            ("toxic", lambda: detectors.detect_toxic_content(text, lexicon)),
            ("excessive_caps", lambda: detectors.detect_excessive_caps(text)),
            ("repeated_content", lambda: detectors.detect_repeated_content(text, history)),
            ("off_topic", lambda: detectors.detect_off_topic(text, lexicon)),
        ])

        flags: list[ModerationFlag] = []
        for name, fn in checks:
            flags.extend(self._run_detector(name, fn))

        return [f for f in flags if f.confidence >= config.flag_thresholds.for_type(f.type)]

    # -- public API ----------------------------------------------------------

    def moderate(
        self,
        content: Any,
        user_id: str,
        content_type: ContentType | str = ContentType.STORY,
    ) -> ModerationResult:
        """Moderate one submission and update the author's history."""
        try:
            content_type = ContentType(content_type)
        except ValueError as e:
            raise InvalidContentTypeError(f"Unknown content type: {content_type!r}") from e
        config = self._config

        if not config.enabled:
            return ModerationResult(
                is_approved=True,
                confidence=1.0,
                flags=[],
                severity=Severity.LOW,
                suggested_action=ModerationAction.APPROVE,
                explanation=DISABLED_EXPLANATION,
                auto_moderated=False,
            )

        text = content if isinstance(content, str) else ""

        with self._history.lock_for(user_id):
            flags = self.analyze(text, self._history.get(user_id))
            severity = calculate_severity(flags)
            action = determine_action(flags, severity, config)
            confidence = calculate_confidence(flags)

            result = ModerationResult(
                is_approved=action == ModerationAction.APPROVE,
                confidence=confidence,
                flags=flags,
                severity=severity,
                suggested_action=action,
                explanation=generate_explanation(flags, action),
                auto_moderated=config.auto_moderation_enabled
                and confidence > AUTO_MODERATION_CONFIDENCE,
            )
            self._history.record(user_id, text, result)

        logger.info(
            "moderation event",
            extra={
                "user_id": user_id,
                "content_type": content_type.value,
                "action": action.value,
                "severity": severity.value,
                "flags": [f.type.value for f in flags],
                "confidence": confidence,
            },
        )
        return result

    async def moderate_content(
        self,
        content: Any,
        user_id: str,
        content_type: ContentType | str = ContentType.STORY,
    ) -> ModerationResult:
        """Awaitable form of :meth:`moderate`; never suspends."""
        return self.moderate(content, user_id, content_type)

    async def moderate_story(self, content: Any, user_id: str) -> ModerationResult:
        return self.moderate(content, user_id, ContentType.STORY)

    async def moderate_comment(self, content: Any, user_id: str) -> ModerationResult:
        return self.moderate(content, user_id, ContentType.COMMENT)

    async def moderate_message(self, content: Any, user_id: str) -> ModerationResult:
        return self.moderate(content, user_id, ContentType.MESSAGE)

    async def moderate_profile(self, content: Any, user_id: str) -> ModerationResult:
        return self.moderate(content, user_id, ContentType.PROFILE)

    # -- configuration -------------------------------------------------------

    def update_config(self, partial: dict[str, Any]) -> ModerationConfig:
        """Merge *partial* into the current config; raises ConfigValidationError."""
        self._config = merge_config(self._config, partial)
        logger.info("moderation config updated: %s", sorted(partial))
        return self.get_config()

    def get_config(self) -> ModerationConfig:
        return self._config.model_copy(deep=True)

    # -- history -------------------------------------------------------------

    def get_user_history(self, user_id: str) -> Optional[UserModerationHistory]:
        return self._history.get(user_id)

    def clear_user_history(self, user_id: str) -> None:
        self._history.clear(user_id)

    def get_system_stats(self) -> SystemStats:
        histories = self._history.values()
        total_users = len(histories)
        flagged_users = sum(1 for h in histories if h.total_flags > 0)
        return SystemStats(
            total_users=total_users,
            total_flags=sum(h.total_flags for h in histories),
            flagged_users=flagged_users,
            flagged_user_percentage=(flagged_users / total_users) * 100 if total_users else 0.0,
            config_version=self._config.version,
        )
