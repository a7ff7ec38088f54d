"""Tests for lexicon and config loading."""

import tempfile

import pytest
import yaml

from desahogo.errors import ConfigValidationError, LexiconError
from desahogo.moderation.config import load_config
from desahogo.moderation.lexicon import DEFAULT_LEXICON, load_lexicon
from desahogo.moderation.models import FlagType, ModerationAction
from desahogo.moderation.moderator import ContentModerator


def _write_yaml(data) -> str:
    """Write data to a temporary YAML file and return the path."""
    f = tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False, encoding="utf-8")
    yaml.safe_dump(data, f, allow_unicode=True)
    f.close()
    return f.name


# --- Lexicon ---


def test_partial_lexicon_falls_back_to_defaults():
    path = _write_yaml({
        "version": "2.0.0",
        "crisis": {"critical": ["estoy harto de todo"]},
    })
    lexicon = load_lexicon(path)
    assert lexicon.version == "2.0.0"
    assert lexicon.crisis.critical == ("estoy harto de todo",)
    assert lexicon.crisis.high == DEFAULT_LEXICON.crisis.high
    assert lexicon.spam == DEFAULT_LEXICON.spam
    assert lexicon.chat_crisis.critical == DEFAULT_LEXICON.chat_crisis.critical


def test_custom_lexicon_drives_moderation():
    path = _write_yaml({"crisis": {"critical": ["estoy harto de todo"]}})
    moderator = ContentModerator(lexicon=load_lexicon(path))
    result = moderator.moderate("Estoy harto de todo", "u1")
    assert FlagType.SUICIDE_IDEATION in result.flag_types
    assert result.suggested_action == ModerationAction.ESCALATE_CRISIS


def test_custom_spam_patterns():
    path = _write_yaml({"patterns": {"spam": ["oferta exclusiva", "sígueme", "gratis"]}})
    moderator = ContentModerator(lexicon=load_lexicon(path))
    result = moderator.moderate("Oferta exclusiva gratis, sígueme", "u1")
    assert result.flag_types == {FlagType.SPAM}


def test_invalid_pattern_rejected():
    path = _write_yaml({"patterns": {"harassment": ["(unclosed"]}})
    with pytest.raises(LexiconError):
        load_lexicon(path)


def test_non_mapping_lexicon_rejected():
    with pytest.raises(LexiconError):
        load_lexicon(_write_yaml(["just", "a", "list"]))


def test_missing_lexicon_file():
    with pytest.raises(LexiconError):
        load_lexicon("/nonexistent/lexicon.yaml")


# --- Config ---


def test_load_config_file():
    path = _write_yaml({
        "auto_moderation_enabled": False,
        "flag_thresholds": {"off_topic": 0.6},
        "action_thresholds": {"require_review": 0.5},
    })
    cfg = load_config(path)
    assert not cfg.auto_moderation_enabled
    assert cfg.flag_thresholds.off_topic == 0.6
    assert cfg.flag_thresholds.spam == 0.7
    assert cfg.action_thresholds.require_review == 0.5
    assert cfg.action_thresholds.auto_remove == 0.9


def test_load_config_rejects_bad_threshold():
    path = _write_yaml({"action_thresholds": {"auto_hide": -0.1}})
    with pytest.raises(ConfigValidationError) as exc:
        load_config(path)
    assert any("auto_hide" in e for e in exc.value.errors)


def test_load_config_rejects_unknown_key():
    with pytest.raises(ConfigValidationError):
        load_config(_write_yaml({"flag_thresholds": {"profanity": 0.5}}))


def test_empty_config_file_uses_defaults():
    cfg = load_config(_write_yaml(None))
    assert cfg.enabled
    assert cfg.flag_thresholds.suicide_ideation == 0.3
