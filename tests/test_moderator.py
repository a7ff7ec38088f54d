"""Tests for the moderation aggregator."""

import asyncio
import logging

import pytest

from desahogo.errors import ConfigValidationError, DesahogoError, InvalidContentTypeError
from desahogo.moderation import detectors
from desahogo.moderation.moderator import (
    CLEAN_EXPLANATION,
    ContentModerator,
    calculate_confidence,
    calculate_severity,
    determine_action,
)
from desahogo.moderation.config import ModerationConfig
from desahogo.moderation.models import (
    FlagType,
    ModerationAction,
    ModerationFlag,
    Severity,
)

CLEAN_TEXT = "Hoy fui a terapia y me sentí mejor, gracias a todos por su apoyo"
CRISIS_TEXT = "ya no quiero vivir, quiero matarme"


def _flag(flag_type: FlagType, confidence: float) -> ModerationFlag:
    return ModerationFlag(type=flag_type, confidence=confidence)


# --- Verdicts ---


def test_clean_content_is_approved():
    result = ContentModerator().moderate(CLEAN_TEXT, "u1")
    assert result.is_approved
    assert result.flags == []
    assert result.severity == Severity.LOW
    assert result.suggested_action == ModerationAction.APPROVE
    assert result.confidence == 1.0
    assert result.explanation == CLEAN_EXPLANATION
    assert result.auto_moderated


def test_critical_crisis_escalates():
    result = ContentModerator().moderate(CRISIS_TEXT, "u1")
    suicide = [f for f in result.flags if f.type == FlagType.SUICIDE_IDEATION]
    assert suicide and suicide[0].confidence == pytest.approx(0.95)
    assert result.suggested_action == ModerationAction.ESCALATE_CRISIS
    assert result.severity == Severity.CRITICAL
    assert not result.is_approved


def test_crisis_escalates_over_other_flags():
    result = ContentModerator().moderate("eres un idiota, vete a la mierda, quiero morir", "u1")
    assert FlagType.HARASSMENT in result.flag_types
    assert result.suggested_action == ModerationAction.ESCALATE_CRISIS


def test_excessive_caps_verdict():
    result = ContentModerator().moderate("AYUDA POR FAVOR NECESITO HABLAR CON ALGUIEN AHORA", "u1")
    assert result.flag_types == {FlagType.EXCESSIVE_CAPS}
    assert result.flags[0].confidence >= 0.9
    # Action follows the highest flag confidence (1.0 >= auto_remove).
    assert result.suggested_action == ModerationAction.AUTO_REMOVE
    assert result.severity == Severity.MEDIUM


def test_spam_repeat_offender():
    moderator = ContentModerator()
    for _ in range(3):
        r = moderator.moderate("compra ahora, gana dinero fácil: http://x.com", "spammer")
        assert FlagType.SPAM in r.flag_types
    assert moderator.get_user_history("spammer").recent_spam_flags == 3

    result = moderator.moderate(
        "loooooook this!!!! http://a.com http://b.com http://c.com", "spammer"
    )
    spam = [f for f in result.flags if f.type == FlagType.SPAM][0]
    assert spam.confidence == pytest.approx(1.0)
    assert "Historial reciente de spam" in spam.evidence
    assert result.suggested_action == ModerationAction.AUTO_REMOVE


def test_harassment_flagged_for_review():
    result = ContentModerator().moderate("nadie te quiere", "u1")
    assert result.flag_types == {FlagType.HARASSMENT}
    assert result.severity == Severity.HIGH
    assert result.suggested_action == ModerationAction.FLAG_FOR_REVIEW
    assert result.confidence == pytest.approx(0.7)
    assert not result.auto_moderated
    assert result.explanation.endswith("Acción: Contenido marcado para revisión manual")


def test_warn_user_counts_warnings():
    moderator = ContentModerator()
    moderator.update_config({
        "action_thresholds": {"auto_remove": 1.0, "auto_hide": 1.0, "require_review": 0.95},
    })
    result = moderator.moderate("nadie te quiere", "u1")
    assert result.suggested_action == ModerationAction.WARN_USER
    assert moderator.get_user_history("u1").warning_count == 1


def test_flags_below_threshold_are_dropped():
    text = "Vendo entradas para el partido de fútbol del domingo, muy buen precio para todos"
    result = ContentModerator().moderate(text, "u1")
    assert result.flags == []

    moderator = ContentModerator()
    moderator.update_config({"flag_thresholds": {"off_topic": 0.5}})
    assert moderator.moderate(text, "u1").flag_types == {FlagType.OFF_TOPIC}


def test_identical_calls_are_stable():
    moderator = ContentModerator()
    first = moderator.moderate("eres un idiota", "u1")
    second = moderator.moderate("eres un idiota", "u1")
    assert [f.to_dict() for f in first.flags] == [f.to_dict() for f in second.flags]
    assert first.severity == second.severity
    assert first.suggested_action == second.suggested_action


def test_repeated_approved_content_is_flagged():
    moderator = ContentModerator()
    assert moderator.moderate("Hoy me siento mucho mejor que ayer", "u1").is_approved
    result = moderator.moderate("hoy me siento mucho mejor que ayer", "u1")
    assert FlagType.REPEATED_CONTENT in result.flag_types


def test_empty_and_non_text_input_approved():
    moderator = ContentModerator()
    for content in ("", None, 42):
        result = moderator.moderate(content, "u1")
        assert result.suggested_action == ModerationAction.APPROVE
        assert result.flags == []


def test_disabled_moderation_bypasses_detectors():
    moderator = ContentModerator(ModerationConfig(enabled=False))
    result = moderator.moderate(CRISIS_TEXT, "u1")
    assert result.is_approved
    assert result.confidence == 1.0
    assert result.explanation == "Moderation disabled"
    assert not result.auto_moderated
    assert moderator.get_user_history("u1") is None


def test_crisis_detection_toggle():
    moderator = ContentModerator()
    moderator.update_config({"crisis_detection_enabled": False})
    assert moderator.moderate(CRISIS_TEXT, "u1").is_approved


def test_failing_detector_is_isolated(monkeypatch, caplog):
    def boom(text, lexicon):
        raise RuntimeError("regex engine fault")

    monkeypatch.setattr(detectors, "detect_toxic_content", boom)
    with caplog.at_level(logging.ERROR):
        result = ContentModerator().moderate("eres un idiota, quiero morir", "u1")

    assert FlagType.HARASSMENT not in result.flag_types
    assert result.suggested_action == ModerationAction.ESCALATE_CRISIS
    assert "Detector toxic failed" in caplog.text


def test_async_entry_points():
    moderator = ContentModerator()
    result = asyncio.run(moderator.moderate_content(CRISIS_TEXT, "u1", "message"))
    assert result.suggested_action == ModerationAction.ESCALATE_CRISIS
    assert asyncio.run(moderator.moderate_comment(CLEAN_TEXT, "u2")).is_approved


# --- History ---


def test_history_keeps_ten_most_recent():
    moderator = ContentModerator()
    for i in range(15):
        assert moderator.moderate(f"nota {i}", "u1").is_approved
    history = moderator.get_user_history("u1")
    assert list(history.recent_content) == [f"nota {i}" for i in range(5, 15)]


def test_history_counts_flags():
    moderator = ContentModerator()
    moderator.moderate("quiero morir, estoy deprimido, desesperado y agotado", "u1")
    history = moderator.get_user_history("u1")
    assert history.total_flags == 2
    assert history.last_flagged_at is not None
    assert list(history.recent_content) == []


def test_clear_history():
    moderator = ContentModerator()
    moderator.moderate(CLEAN_TEXT, "u1")
    moderator.clear_user_history("u1")
    assert moderator.get_user_history("u1") is None


def test_system_stats():
    moderator = ContentModerator()
    moderator.moderate(CLEAN_TEXT, "calm")
    moderator.moderate("nadie te quiere", "rude")
    stats = moderator.get_system_stats()
    assert stats.total_users == 2
    assert stats.total_flags == 1
    assert stats.flagged_users == 1
    assert stats.flagged_user_percentage == pytest.approx(50.0)
    assert stats.config_version == "1.0.0"


def test_system_stats_empty():
    stats = ContentModerator().get_system_stats()
    assert stats.total_users == 0
    assert stats.flagged_user_percentage == 0.0


# --- Config ---


def test_update_config_rejects_out_of_range():
    moderator = ContentModerator()
    with pytest.raises(ConfigValidationError):
        moderator.update_config({"flag_thresholds": {"spam": 1.5}})
    assert moderator.get_config().flag_thresholds.spam == 0.7


def test_update_config_partial_tables():
    moderator = ContentModerator()
    cfg = moderator.update_config({"flag_thresholds": {"spam": 0.5}, "strict_mode": True})
    assert cfg.flag_thresholds.spam == 0.5
    assert cfg.flag_thresholds.harassment == 0.6
    assert cfg.strict_mode


def test_get_config_returns_copy():
    moderator = ContentModerator()
    cfg = moderator.get_config()
    cfg.enabled = False
    assert moderator.get_config().enabled


# --- Verdict arithmetic ---


def test_severity_rules():
    assert calculate_severity([]) == Severity.LOW
    assert calculate_severity([_flag(FlagType.VIOLENCE, 0.8)]) == Severity.CRITICAL
    assert calculate_severity([_flag(FlagType.SELF_HARM, 0.7)]) == Severity.MEDIUM
    assert calculate_severity([_flag(FlagType.HATE_SPEECH, 0.65)]) == Severity.HIGH
    assert calculate_severity([_flag(FlagType.SPAM, 0.5)]) == Severity.LOW


def test_severity_is_monotonic_in_confidence():
    steps = [i / 20 for i in range(21)]
    for flag_type in FlagType:
        previous = Severity.LOW
        for c in steps:
            current = calculate_severity([_flag(flag_type, c)])
            assert previous <= current
            previous = current


def test_action_never_suspends():
    config = ModerationConfig()
    for flag_type in FlagType:
        for c in (0.1, 0.55, 0.65, 0.85, 0.95):
            flags = [_flag(flag_type, c)]
            action = determine_action(flags, calculate_severity(flags), config)
            assert action not in (ModerationAction.SUSPEND_USER, ModerationAction.REQUIRE_EDIT)


def test_confidence_weighting():
    flags = [_flag(FlagType.EXCESSIVE_CAPS, 1.0), _flag(FlagType.HARASSMENT, 0.5)]
    assert calculate_confidence(flags) == pytest.approx((0.3 + 0.9) / 2.1)
    assert calculate_confidence([]) == 1.0


def test_hate_speech_auto_hidden():
    result = ContentModerator().moderate("palabras de odio por raza", "u1")
    assert result.flag_types == {FlagType.HATE_SPEECH}
    assert result.flags[0].confidence == pytest.approx(0.85)
    assert result.severity == Severity.HIGH
    assert result.suggested_action == ModerationAction.AUTO_HIDE


def test_auto_moderation_disabled_on_clean_content():
    moderator = ContentModerator(ModerationConfig(auto_moderation_enabled=False))
    result = moderator.moderate(CLEAN_TEXT, "u1")
    assert result.is_approved
    assert result.confidence == 1.0
    assert not result.auto_moderated


def test_unknown_content_type_rejected():
    moderator = ContentModerator()
    with pytest.raises(InvalidContentTypeError):
        moderator.moderate(CLEAN_TEXT, "u1", "email")
    with pytest.raises(DesahogoError):
        moderator.moderate(CLEAN_TEXT, "u1", "email")
    assert moderator.get_user_history("u1") is None
