"""Runtime-tunable moderation configuration.

Thresholds must lie in [0, 1]. Out-of-range values are rejected with
:class:`ConfigValidationError` instead of being clamped.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from desahogo.errors import ConfigValidationError
from desahogo.moderation.models import FlagType

CONFIG_VERSION = "1.0.0"


class FlagThresholds(BaseModel):
    """Minimum confidence for a flag of each type to be kept."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    spam: float = Field(0.7, ge=0.0, le=1.0)
    harassment: float = Field(0.6, ge=0.0, le=1.0)
    hate_speech: float = Field(0.5, ge=0.0, le=1.0)
    self_harm: float = Field(0.4, ge=0.0, le=1.0)
    suicide_ideation: float = Field(0.3, ge=0.0, le=1.0)
    violence: float = Field(0.6, ge=0.0, le=1.0)
    adult_content: float = Field(0.8, ge=0.0, le=1.0)
    misinformation: float = Field(0.7, ge=0.0, le=1.0)
    off_topic: float = Field(0.8, ge=0.0, le=1.0)
    excessive_caps: float = Field(0.9, ge=0.0, le=1.0)
    repeated_content: float = Field(0.8, ge=0.0, le=1.0)
    fake_profile: float = Field(0.7, ge=0.0, le=1.0)
    solicitation: float = Field(0.6, ge=0.0, le=1.0)

    def for_type(self, flag_type: FlagType) -> float:
        return getattr(self, flag_type.value)


class ActionThresholds(BaseModel):
    """Maximum-flag-confidence cut-offs for the automatic actions."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    auto_hide: float = Field(0.8, ge=0.0, le=1.0)
    auto_remove: float = Field(0.9, ge=0.0, le=1.0)
    escalate_crisis: float = Field(0.4, ge=0.0, le=1.0)  # reported only
    require_review: float = Field(0.6, ge=0.0, le=1.0)


class ModerationConfig(BaseModel):
    """Feature toggles and threshold tables for a moderator instance."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    enabled: bool = True
    auto_moderation_enabled: bool = True
    strict_mode: bool = False
    crisis_detection_enabled: bool = True
    allow_anonymous: bool = True
    flag_thresholds: FlagThresholds = Field(default_factory=FlagThresholds)
    action_thresholds: ActionThresholds = Field(default_factory=ActionThresholds)
    version: str = CONFIG_VERSION


def _format_errors(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]


def validate_config(data: dict[str, Any]) -> ModerationConfig:
    """Validate a full configuration mapping."""
    try:
        return ModerationConfig.model_validate(data)
    except ValidationError as e:
        errors = _format_errors(e)
        raise ConfigValidationError(
            "Invalid moderation config: " + "; ".join(errors), errors
        ) from e


def _deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def merge_config(current: ModerationConfig, partial: dict[str, Any]) -> ModerationConfig:
    """Apply a partial update (nested tables may be partial) and re-validate."""
    if not isinstance(partial, dict):
        raise ConfigValidationError("Config update must be a mapping")
    return validate_config(_deep_merge(current.model_dump(), partial))


def load_config(path: str | Path) -> ModerationConfig:
    """Load a moderation config from a YAML file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigValidationError(f"Failed to read config {path}: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping")
    return validate_config(data)
