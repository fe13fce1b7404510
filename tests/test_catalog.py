import json

import pytest

from app.core.catalog import DEFAULT_PROCEDURES, Catalog, load_catalog
from app.core.errors import BookingError, ErrorCode


def test_default_catalog_contents(catalog):
    procedure = catalog.get_procedure("Trucco semipermanente - Sopracciglia")
    assert procedure.professional_id == "professional_1"
    assert procedure.duration_minutes == 120
    assert catalog.get_resource_id("professional_4") == "calendar_id_4"
    assert len(catalog.procedures()) == len(DEFAULT_PROCEDURES)


def test_every_default_professional_has_a_calendar(catalog):
    for procedure in catalog.procedures():
        assert catalog.get_resource_id(procedure.professional_id)


def test_procedures_sorted_by_name(catalog):
    names = [p.name for p in catalog.procedures()]
    assert names == sorted(names)


def test_unknown_procedure(catalog):
    with pytest.raises(BookingError) as exc:
        catalog.get_procedure("Unknown Service")
    assert exc.value.code == ErrorCode.INVALID_PROCEDURE


def test_professional_without_calendar():
    catalog = Catalog.from_dict(
        {"procedures": {"Massage": {"professional_id": "ghost", "duration_minutes": 30}}, "calendars": {}}
    )
    with pytest.raises(BookingError) as exc:
        catalog.get_resource_id(catalog.get_procedure("Massage").professional_id)
    assert exc.value.code == ErrorCode.PROFESSIONAL_NOT_FOUND


@pytest.mark.parametrize("minutes", [0, -5, "60", 1.5, True])
def test_invalid_duration_rejected(minutes):
    with pytest.raises(ValueError):
        Catalog.from_dict(
            {"procedures": {"X": {"professional_id": "p", "duration_minutes": minutes}}, "calendars": {"p": "c"}}
        )


def test_catalog_is_read_only(catalog):
    with pytest.raises(TypeError):
        catalog._procedures["New"] = None  # type: ignore[index]


def test_load_catalog_from_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            {
                "procedures": {"Haircut": {"professional_id": "stylist", "duration_minutes": 45}},
                "calendars": {"stylist": "stylist@group.calendar.google.com"},
            }
        ),
        encoding="utf-8",
    )
    catalog = load_catalog(str(path))
    assert catalog.get_procedure("Haircut").duration_minutes == 45
    assert catalog.get_resource_id("stylist") == "stylist@group.calendar.google.com"


def test_load_catalog_default():
    assert load_catalog("").get_procedure("Microblading").duration_minutes == 120
