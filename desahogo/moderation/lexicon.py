"""Keyword lists and regex patterns used by the moderation detectors.

The tables are plain data: a :class:`Lexicon` can be loaded from a YAML file
so that vocabulary can be tuned or localized without touching the detectors.

YAML layout (every key optional, missing keys fall back to the defaults)::

    version: "1.0.0"
    crisis:        {critical: [...], high: [...], medium: [...]}
    chat_crisis:   {critical: [...], high: [...], medium: [...]}
    patterns:
      harassment: [regex, ...]
      hate_speech: [regex, ...]
      spam: [regex, ...]
      links: regex
      repeated_chars: regex
    off_topic:
      relevant: [...]
      indicators: [...]
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from desahogo.errors import LexiconError

# ---------------------------------------------------------------------------
# Crisis tiers consulted by the moderation pipeline
# ---------------------------------------------------------------------------

CRISIS_CRITICAL: tuple[str, ...] = (
    "suicidarme", "matarme", "acabar con todo", "no quiero vivir", "quiero morir",
    "plan de suicidio", "pastillas para morir", "manera de suicidarme",
    "hora de despedirme", "última vez", "no aguanto más",
)

CRISIS_HIGH: tuple[str, ...] = (
    "suicidio", "autolesión", "cortarme", "lastimarme", "hacerme daño",
    "no sirvo para nada", "soy una carga", "todos estarían mejor sin mí",
    "no hay esperanza", "no hay salida", "estoy perdido",
)

CRISIS_MEDIUM: tuple[str, ...] = (
    "deprimido", "desesperado", "sin salida", "no puedo más", "agotado",
    "vacío", "solo", "abandonado", "inútil", "fracaso",
)

# ---------------------------------------------------------------------------
# Crisis tiers consulted by the standalone chat analyzer
# ---------------------------------------------------------------------------

CHAT_CRISIS_CRITICAL: tuple[str, ...] = (
    # Suicidal ideation (es)
    "me quiero matar", "quiero matarme", "voy a suicidarme", "me voy a suicidar",
    "quiero morir", "no quiero vivir", "mejor muerto", "acabar con todo",
    "terminar con todo", "quitarme la vida", "ya no aguanto",
    "no vale la pena vivir", "prefiero estar muerto", "se acabó todo",
    # Suicidal ideation (en)
    "want to kill myself", "going to kill myself", "want to die", "better off dead",
    "end it all", "take my life", "commit suicide", "not worth living",
    "can't go on", "rather be dead",
    # Self-harm
    "me voy a lastimar", "quiero lastimarme", "voy a hacerme daño", "cortarme",
    "hurt myself", "harm myself", "cut myself",
)

CHAT_CRISIS_HIGH: tuple[str, ...] = (
    # Hopelessness (es)
    "no hay esperanza", "todo está perdido", "soy una carga", "nadie me quiere",
    "estoy solo", "no sirvo para nada", "soy un fracaso", "ya no puedo más",
    "estoy cansado de vivir", "no tiene sentido",
    # Hopelessness (en)
    "no hope", "nothing matters", "I'm a burden", "nobody loves me",
    "completely alone", "worthless", "total failure", "can't take it",
    "tired of living", "no point",
    # Substance abuse
    "demasiado alcohol", "muchas drogas", "pastillas para dormir",
    "too much alcohol", "too many drugs", "sleeping pills",
)

CHAT_CRISIS_MEDIUM: tuple[str, ...] = (
    "muy deprimido", "muy triste", "sin energía", "no duermo", "no como",
    "me siento vacío", "todo mal", "no puedo seguir",
    "very depressed", "extremely sad", "no energy", "can't sleep", "can't eat",
    "feel empty", "everything wrong", "can't continue",
)

# ---------------------------------------------------------------------------
# Toxic-content and spam patterns
# ---------------------------------------------------------------------------

HARASSMENT_PATTERNS: tuple[str, ...] = (
    r"eres un(a)?\s+(idiota|estúpid[oa]|imbécil)",
    r"vete a la mierda",
    r"nadie te quiere",
    r"deberías morirte",
    r"no sirves para nada",
)

HATE_SPEECH_PATTERNS: tuple[str, ...] = (
    r"palabras de odio por raza",
    r"palabras de odio por género",
    r"palabras de odio por orientación",
    r"palabras de odio por religión",
)

SPAM_PATTERNS: tuple[str, ...] = (
    r"compra ahora",
    r"visita mi perfil",
    r"gana dinero fácil",
    r"click aquí",
    r"(www\.|http)",
)

LINK_PATTERN = r"(http|www\.)"
REPEATED_CHARS_PATTERN = r"(.)\1{4,}"

# ---------------------------------------------------------------------------
# Topic relevance
# ---------------------------------------------------------------------------

MENTAL_HEALTH_KEYWORDS: tuple[str, ...] = (
    "ansiedad", "depresión", "estrés", "terapia", "bienestar", "emociones",
    "sentimientos", "apoyo", "ayuda", "salud mental", "psicología",
)

OFF_TOPIC_INDICATORS: tuple[str, ...] = (
    "compra", "venta", "precio", "oferta", "descuento", "promoción",
    "política", "partido", "elecciones", "gobierno",
    "deportes", "fútbol", "equipo",
)

LEXICON_VERSION = "1.0.0"


def _compile_all(patterns: tuple[str, ...], category: str) -> tuple[re.Pattern[str], ...]:
    compiled = []
    for p in patterns:
        try:
            compiled.append(re.compile(p, re.IGNORECASE))
        except re.error as e:
            raise LexiconError(f"Invalid {category} pattern {p!r}: {e}") from e
    return tuple(compiled)


@dataclass
class CrisisTiers:
    """Three escalating keyword buckets."""

    critical: tuple[str, ...] = ()
    high: tuple[str, ...] = ()
    medium: tuple[str, ...] = ()


@dataclass
class Lexicon:
    """Every keyword list and pattern the detectors read."""

    version: str = LEXICON_VERSION
    crisis: CrisisTiers = field(
        default_factory=lambda: CrisisTiers(CRISIS_CRITICAL, CRISIS_HIGH, CRISIS_MEDIUM)
    )
    chat_crisis: CrisisTiers = field(
        default_factory=lambda: CrisisTiers(
            CHAT_CRISIS_CRITICAL, CHAT_CRISIS_HIGH, CHAT_CRISIS_MEDIUM
        )
    )
    harassment: tuple[str, ...] = HARASSMENT_PATTERNS
    hate_speech: tuple[str, ...] = HATE_SPEECH_PATTERNS
    spam: tuple[str, ...] = SPAM_PATTERNS
    links: str = LINK_PATTERN
    repeated_chars: str = REPEATED_CHARS_PATTERN
    relevant_keywords: tuple[str, ...] = MENTAL_HEALTH_KEYWORDS
    off_topic_indicators: tuple[str, ...] = OFF_TOPIC_INDICATORS

    def __post_init__(self) -> None:
        self.harassment_re = _compile_all(self.harassment, "harassment")
        self.hate_speech_re = _compile_all(self.hate_speech, "hate_speech")
        self.spam_re = _compile_all(self.spam, "spam")
        self.links_re = _compile_all((self.links,), "links")[0]
        # Case-sensitive: "aAaAa" is not a run of identical characters.
        try:
            self.repeated_chars_re = re.compile(self.repeated_chars)
        except re.error as e:
            raise LexiconError(f"Invalid repeated_chars pattern {self.repeated_chars!r}: {e}") from e


DEFAULT_LEXICON = Lexicon()


def _tiers(data: dict[str, Any] | None, default: CrisisTiers) -> CrisisTiers:
    if not data:
        return default
    return CrisisTiers(
        critical=tuple(data.get("critical", default.critical)),
        high=tuple(data.get("high", default.high)),
        medium=tuple(data.get("medium", default.medium)),
    )


def lexicon_from_dict(data: dict[str, Any]) -> Lexicon:
    """Build a lexicon from a parsed mapping, filling gaps from the defaults."""
    if not isinstance(data, dict):
        raise LexiconError("Lexicon document must be a mapping")

    d = DEFAULT_LEXICON
    patterns = data.get("patterns") or {}
    off_topic = data.get("off_topic") or {}
    return Lexicon(
        version=str(data.get("version", d.version)),
        crisis=_tiers(data.get("crisis"), d.crisis),
        chat_crisis=_tiers(data.get("chat_crisis"), d.chat_crisis),
        harassment=tuple(patterns.get("harassment", d.harassment)),
        hate_speech=tuple(patterns.get("hate_speech", d.hate_speech)),
        spam=tuple(patterns.get("spam", d.spam)),
        links=patterns.get("links", d.links),
        repeated_chars=patterns.get("repeated_chars", d.repeated_chars),
        relevant_keywords=tuple(off_topic.get("relevant", d.relevant_keywords)),
        off_topic_indicators=tuple(off_topic.get("indicators", d.off_topic_indicators)),
    )


def load_lexicon(path: str | Path) -> Lexicon:
    """Load a lexicon from a YAML file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise LexiconError(f"Failed to read lexicon {path}: {e}") from e
    return lexicon_from_dict(data or {})
