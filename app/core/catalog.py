"""Static procedure and calendar tables.

Loaded once at startup and read-only afterwards. Each procedure belongs to exactly
one professional; each professional owns exactly one calendar (the resource id
bookings are serialized on).
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from app.core.errors import BookingError, ErrorCode
from app.models.booking import ProcedureDefinition

logger = logging.getLogger(__name__)

# name -> (professional_id, duration_minutes)
DEFAULT_PROCEDURES: dict[str, tuple[str, int]] = {
    "Trucco semipermanente - Sopracciglia": ("professional_1", 120),
    "Trucco semipermanente - Eyeliner": ("professional_1", 90),
    "Trucco semipermanente - Labbra": ("professional_1", 150),
    "Microblading": ("professional_1", 120),
    "Consulenza personalizzata": ("professional_1", 30),
    "Laminazione ciglia": ("professional_2", 60),
    "Tinta ciglia e sopracciglia": ("professional_2", 30),
    "Brazilian manicure SPA": ("professional_2", 60),
    "Semipermanente unghie": ("professional_2", 60),
    "Ricostruzione gel": ("professional_2", 90),
    "Brazilian pedicure SPA": ("professional_2", 60),
    "Clean-up viso": ("professional_3", 60),
    "Face-lift (antiage)": ("professional_3", 90),
    "Microneedling": ("professional_3", 60),
    "Presso-slim": ("professional_3", 45),
    "Body-shape": ("professional_3", 60),
    "Massaggio rilassante": ("professional_3", 60),
    "Massaggio drenante": ("professional_3", 60),
    "Epilazione laser - Viso": ("professional_4", 15),
    "Epilazione laser - Gambe": ("professional_4", 45),
    "Epilazione laser - Inguine": ("professional_4", 30),
    "Epilazione laser - Ascelle": ("professional_4", 15),
}

DEFAULT_CALENDARS: dict[str, str] = {
    "professional_1": "calendar_id_1",
    "professional_2": "calendar_id_2",
    "professional_3": "calendar_id_3",
    "professional_4": "calendar_id_4",
}


class Catalog:
    def __init__(
        self,
        procedures: Mapping[str, ProcedureDefinition],
        calendars: Mapping[str, str],
    ) -> None:
        self._procedures = MappingProxyType(dict(procedures))
        self._calendars = MappingProxyType(dict(calendars))

    @classmethod
    def default(cls) -> "Catalog":
        return cls.from_dict(
            {
                "procedures": {
                    name: {"professional_id": pid, "duration_minutes": minutes}
                    for name, (pid, minutes) in DEFAULT_PROCEDURES.items()
                },
                "calendars": DEFAULT_CALENDARS,
            }
        )

    @classmethod
    def from_dict(cls, data: Mapping) -> "Catalog":
        raw_procedures = data.get("procedures") or {}
        raw_calendars = data.get("calendars") or {}
        procedures: dict[str, ProcedureDefinition] = {}
        for name, entry in raw_procedures.items():
            minutes = entry.get("duration_minutes")
            # bool is an int subclass; reject it explicitly
            if not isinstance(minutes, int) or isinstance(minutes, bool) or minutes <= 0:
                raise ValueError(f"Procedure {name!r}: duration_minutes must be a positive integer")
            procedures[name] = ProcedureDefinition(
                name=name,
                professional_id=str(entry["professional_id"]),
                duration_minutes=minutes,
            )
        calendars = {str(pid): str(rid) for pid, rid in raw_calendars.items()}
        missing = {p.professional_id for p in procedures.values()} - calendars.keys()
        if missing:
            logger.warning("Catalog: professionals without a calendar: %s", ", ".join(sorted(missing)))
        return cls(procedures, calendars)

    @classmethod
    def from_file(cls, path: str | Path) -> "Catalog":
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def get_procedure(self, name: str) -> ProcedureDefinition:
        procedure = self._procedures.get(name)
        if procedure is None:
            raise BookingError(ErrorCode.INVALID_PROCEDURE, f"Unknown procedure: {name}")
        return procedure

    def get_resource_id(self, professional_id: str) -> str:
        resource_id = self._calendars.get(professional_id)
        if not resource_id:
            raise BookingError(ErrorCode.PROFESSIONAL_NOT_FOUND, f"No calendar for {professional_id}")
        return resource_id

    def procedures(self) -> list[ProcedureDefinition]:
        return sorted(self._procedures.values(), key=lambda p: p.name)


def load_catalog(catalog_file: str = "") -> Catalog:
    if catalog_file:
        logger.info("Loading catalog from %s", catalog_file)
        return Catalog.from_file(catalog_file)
    return Catalog.default()
