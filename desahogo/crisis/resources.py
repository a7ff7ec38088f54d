"""Emergency and support lines shown alongside crisis responses."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CrisisResource:
    name: str
    phone: str
    available: str
    description: str


EMERGENCY_RESOURCES: tuple[CrisisResource, ...] = (
    CrisisResource(
        name="Línea Nacional de Prevención del Suicidio",
        phone="113",
        available="24/7",
        description="Atención inmediata para crisis suicidas",
    ),
    CrisisResource(
        name="Servicios de Emergencia",
        phone="911",
        available="24/7",
        description="Para emergencias médicas o de seguridad",
    ),
    CrisisResource(
        name="Cruz Roja",
        phone="132",
        available="24/7",
        description="Primeros auxilios psicológicos",
    ),
)

SUPPORT_RESOURCES: tuple[CrisisResource, ...] = (
    CrisisResource(
        name="Línea de Escucha",
        phone="106",
        available="24/7",
        description="Apoyo emocional y contención",
    ),
    CrisisResource(
        name="Centro de Asistencia al Suicida",
        phone="(011) 5275-1135",
        available="Lun-Vie 10-20hs",
        description="Asesoramiento especializado",
    ),
)


def get_crisis_resources() -> dict[str, list[CrisisResource]]:
    """Return the ``emergency`` and ``support`` resource lists."""
    return {
        "emergency": list(EMERGENCY_RESOURCES),
        "support": list(SUPPORT_RESOURCES),
    }
