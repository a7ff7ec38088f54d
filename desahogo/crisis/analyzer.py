"""Standalone crisis analyzer for single messages.

Unlike the moderation pipeline's crisis detector, this analyzer stops at the
first tier that matches: a message with a critical keyword reports only the
critical keywords, never the high or medium ones.
"""

from __future__ import annotations

import logging
import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from desahogo.moderation.lexicon import DEFAULT_LEXICON, Lexicon
from desahogo.moderation.models import Severity

logger = logging.getLogger(__name__)

RECOMMENDED_ACTIONS: dict[Severity, str] = {
    Severity.CRITICAL: "Contacto inmediato con servicios de emergencia. Monitoreo continuo del usuario.",
    Severity.HIGH: "Contacto urgente con el usuario. Derivación a profesional de salud mental.",
    Severity.MEDIUM: "Seguimiento cercano. Ofrecer recursos de apoyo.",
    Severity.LOW: "Monitoreo normal. Continuar con apoyo empático.",
}

_ID_ALPHABET = string.digits + string.ascii_lowercase


class AlertStatus(Enum):
    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


@dataclass
class CrisisAnalysis:
    """Outcome of analyzing one message."""

    severity: Severity
    keywords: list[str] = field(default_factory=list)
    requires_alert: bool = False
    recommended_action: str = RECOMMENDED_ACTIONS[Severity.LOW]

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "keywords": list(self.keywords),
            "requires_alert": self.requires_alert,
            "recommended_action": self.recommended_action,
        }


@dataclass
class CrisisAlert:
    """Record handed to whoever notifies the crisis team."""

    id: str
    user_id: str
    username: str
    message: str
    timestamp: datetime
    severity: Severity  # HIGH or CRITICAL
    status: AlertStatus = AlertStatus.PENDING
    keywords: list[str] = field(default_factory=list)
    recommended_action: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "username": self.username,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "severity": self.severity.value,
            "status": self.status.value,
            "keywords": list(self.keywords),
            "recommended_action": self.recommended_action,
        }


def analyze_crisis_content(message: str, lexicon: Optional[Lexicon] = None) -> CrisisAnalysis:
    """Classify *message* into the first crisis tier it matches."""
    tiers = (lexicon or DEFAULT_LEXICON).chat_crisis
    lower = message.lower() if isinstance(message, str) else ""

    severity = Severity.LOW
    keywords: list[str] = []
    for tier_severity, tier in (
        (Severity.CRITICAL, tiers.critical),
        (Severity.HIGH, tiers.high),
        (Severity.MEDIUM, tiers.medium),
    ):
        keywords = [k for k in tier if k.lower() in lower]
        if keywords:
            severity = tier_severity
            break

    return CrisisAnalysis(
        severity=severity,
        keywords=keywords,
        requires_alert=severity in (Severity.HIGH, Severity.CRITICAL),
        recommended_action=RECOMMENDED_ACTIONS[severity],
    )


def _alert_id() -> str:
    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"crisis_{int(time.time() * 1000)}_{suffix}"


def create_crisis_alert(
    user_id: str, username: str, message: str, analysis: CrisisAnalysis
) -> CrisisAlert:
    """Build a pending alert for *analysis*.

    Persisting and dispatching the alert is left to the caller.
    """
    alert = CrisisAlert(
        id=_alert_id(),
        user_id=user_id,
        username=username,
        message=message,
        timestamp=datetime.now(timezone.utc),
        severity=Severity.CRITICAL if analysis.severity == Severity.CRITICAL else Severity.HIGH,
        status=AlertStatus.PENDING,
        keywords=list(analysis.keywords),
        recommended_action=analysis.recommended_action,
    )
    logger.warning(
        "crisis alert created",
        extra={"alert_id": alert.id, "user_id": user_id, "severity": alert.severity.value},
    )
    return alert
