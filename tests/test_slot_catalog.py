import pytest

from app.domain.entities.slot import SlotKey
from app.domain.entities.slot_catalog import SlotCatalog


def test_all_slots_is_times_by_groomers(catalog):
    slots = catalog.all_slots("2025-06-01")

    assert len(slots) == 4
    assert slots[0] == SlotKey(date="2025-06-01", time="09:00", groomer="Groomer 1")
    assert slots[1] == SlotKey(date="2025-06-01", time="09:00", groomer="Groomer 2")


def test_groomer_matching(catalog):
    assert catalog.default_groomer == "Groomer 1"
    assert catalog.match_groomer("groomer 2") == "Groomer 2"
    assert catalog.match_groomer("  GROOMER 1 ") == "Groomer 1"
    assert catalog.match_groomer("Groomer 9") is None
    assert catalog.match_groomer(None) is None
    assert catalog.resolve_groomer(None) == "Groomer 1"
    assert catalog.resolve_groomer("") == "Groomer 1"
    assert catalog.resolve_groomer("groomer 2") == "Groomer 2"


def test_slot_key_ignores_groomer_case():
    a = SlotKey(date="2025-06-01", time="09:00", groomer="Groomer 1")
    b = SlotKey(date="2025-06-01", time="09:00", groomer="groomer 1 ")

    assert a.key == b.key


def test_catalog_requires_times_and_groomers():
    with pytest.raises(ValueError):
        SlotCatalog(times=(), groomers=("Groomer 1",))
    with pytest.raises(ValueError):
        SlotCatalog(times=("09:00",), groomers=())
