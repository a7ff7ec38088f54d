"""Independent flag detectors.

Each detector takes raw text (plus the lexicon and, where relevant, the
user's moderation history) and returns zero or more :class:`ModerationFlag`.
Detectors do not apply per-type thresholds; the moderator filters the pooled
flags afterwards.
"""

from __future__ import annotations

import re
from typing import Optional

from desahogo.moderation.lexicon import Lexicon
from desahogo.moderation.models import FlagType, ModerationFlag, UserModerationHistory

EXCESSIVE_CAPS_RATIO = 0.7
MIN_CAPS_LETTERS = 10
SIMILARITY_THRESHOLD = 0.8
OFF_TOPIC_MIN_LENGTH = 50

_LETTERS_RE = re.compile(r"[a-zA-ZáéíóúÁÉÍÓÚñÑ]")
_UPPER_RE = re.compile(r"[A-ZÁÉÍÓÚÑ]")


def _matches(text_lower: str, keywords: tuple[str, ...]) -> list[str]:
    return [k for k in keywords if k in text_lower]


# ---------------------------------------------------------------------------
# Crisis
# ---------------------------------------------------------------------------


def detect_crisis(text: str, lexicon: Lexicon) -> list[ModerationFlag]:
    """Raise crisis flags from the three keyword tiers.

    The tiers are evaluated independently: a text can carry a
    ``suicide_ideation`` flag and one or two ``self_harm`` flags at once.
    """
    flags: list[ModerationFlag] = []
    lower = text.lower()

    critical = _matches(lower, lexicon.crisis.critical)
    if critical:
        flags.append(
            ModerationFlag(
                type=FlagType.SUICIDE_IDEATION,
                confidence=0.95,
                evidence=critical,
                description="Contenido indica ideación suicida inmediata - requiere intervención urgente",
            )
        )

    high = _matches(lower, lexicon.crisis.high)
    if high:
        flags.append(
            ModerationFlag(
                type=FlagType.SELF_HARM,
                confidence=min(0.9, 0.5 + len(high) * 0.1),
                evidence=high,
                description="Contenido sugiere riesgo de autolesión - requiere revisión",
            )
        )

    medium = _matches(lower, lexicon.crisis.medium)
    if len(medium) >= 3:
        flags.append(
            ModerationFlag(
                type=FlagType.SELF_HARM,
                confidence=0.4 + len(medium) * 0.05,
                evidence=medium,
                description="Múltiples indicadores de angustia emocional",
            )
        )

    return flags


# ---------------------------------------------------------------------------
# Spam
# ---------------------------------------------------------------------------


def detect_spam(
    text: str,
    lexicon: Lexicon,
    history: Optional[UserModerationHistory] = None,
) -> Optional[ModerationFlag]:
    score = 0.0
    evidence: list[str] = []

    for pattern in lexicon.spam_re:
        if pattern.search(text):
            score += 0.3
            evidence.append(f"Patrón de spam detectado: {pattern.pattern}")

    link_count = sum(1 for _ in lexicon.links_re.finditer(text))
    if link_count > 2:
        score += link_count * 0.2
        evidence.append(f"Múltiples enlaces detectados: {link_count}")

    if lexicon.repeated_chars_re.search(text):
        score += 0.2
        evidence.append("Caracteres repetidos excesivamente")

    if history is not None and history.recent_spam_flags > 2:
        score += 0.3
        evidence.append("Historial reciente de spam")

    if score >= 0.5:
        return ModerationFlag(
            type=FlagType.SPAM,
            confidence=min(score, 1.0),
            evidence=evidence,
            description="Contenido identificado como posible spam",
        )
    return None


# ---------------------------------------------------------------------------
# Harassment / hate speech
# ---------------------------------------------------------------------------


def _find_all(text: str, patterns: tuple[re.Pattern[str], ...]) -> list[str]:
    return [m.group(0) for pattern in patterns for m in pattern.finditer(text)]


def detect_toxic_content(text: str, lexicon: Lexicon) -> list[ModerationFlag]:
    flags: list[ModerationFlag] = []

    harassment = _find_all(text, lexicon.harassment_re)
    if harassment:
        flags.append(
            ModerationFlag(
                type=FlagType.HARASSMENT,
                confidence=min(0.9, 0.5 + len(harassment) * 0.2),
                evidence=harassment,
                description="Contenido contiene lenguaje de acoso o intimidación",
            )
        )

    hate = _find_all(text, lexicon.hate_speech_re)
    if hate:
        flags.append(
            ModerationFlag(
                type=FlagType.HATE_SPEECH,
                confidence=0.85,
                evidence=hate,
                description="Contenido contiene discurso de odio",
            )
        )

    return flags


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def caps_ratio(text: str) -> Optional[float]:
    """Share of uppercase letters, or None when there are too few letters."""
    letters = len(_LETTERS_RE.findall(text))
    if letters < MIN_CAPS_LETTERS:
        return None
    return len(_UPPER_RE.findall(text)) / letters


def detect_excessive_caps(text: str) -> Optional[ModerationFlag]:
    ratio = caps_ratio(text)
    if ratio is None or ratio < EXCESSIVE_CAPS_RATIO:
        return None
    return ModerationFlag(
        type=FlagType.EXCESSIVE_CAPS,
        confidence=min(ratio, 1.0),
        evidence=[f"{round(ratio * 100)}% del texto en mayúsculas"],
        description="Uso excesivo de mayúsculas (puede interpretarse como gritos)",
    )


# ---------------------------------------------------------------------------
# Repetition
# ---------------------------------------------------------------------------


def text_similarity(a: str, b: str) -> float:
    """Share of ``a``'s tokens that also appear in ``b``, over the longer token count."""
    words_a = a.lower().split()
    words_b = b.lower().split()
    total = max(len(words_a), len(words_b))
    if total == 0:
        return 0.0
    vocabulary = set(words_b)
    common = [w for w in words_a if w in vocabulary]
    return len(common) / total


def detect_repeated_content(
    text: str, history: Optional[UserModerationHistory]
) -> Optional[ModerationFlag]:
    if history is None:
        return None
    if any(text_similarity(text, previous) > SIMILARITY_THRESHOLD for previous in history.recent_content):
        return ModerationFlag(
            type=FlagType.REPEATED_CONTENT,
            confidence=0.9,
            evidence=["Contenido muy similar a publicación anterior"],
            description="Usuario ha publicado contenido muy similar recientemente",
        )
    return None


# ---------------------------------------------------------------------------
# Topic
# ---------------------------------------------------------------------------


def detect_off_topic(text: str, lexicon: Lexicon) -> Optional[ModerationFlag]:
    lower = text.lower()
    relevant = any(k in lower for k in lexicon.relevant_keywords)
    off_topic = any(k in lower for k in lexicon.off_topic_indicators)

    if off_topic and not relevant and len(text) > OFF_TOPIC_MIN_LENGTH:
        return ModerationFlag(
            type=FlagType.OFF_TOPIC,
            confidence=0.7,
            evidence=["Contenido no relacionado con salud mental"],
            description="El contenido parece no estar relacionado con el tema del grupo",
        )
    return None
