from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.domain.entities.slot_catalog import SlotCatalog
from app.infrastructure.reservations.reservation_ledger import ReservationLedger
from app.infrastructure.store.memory_store import MemoryBookingStore
from app.main import app
from app.wiring.dependencies import get_booking_store, get_catalog, get_reservation_ledger

DAY = "2025-06-01"


class OfflineStore(MemoryBookingStore):
    def list_bookings(self, date=None, status=None, force_refresh=False):
        raise ConnectionError("sheets unreachable")


@pytest.fixture
def api(clock, monkeypatch):
    monkeypatch.setattr(settings, "ENV", "dev")
    monkeypatch.setattr(settings, "ADMIN_API_TOKEN", None)
    store = MemoryBookingStore()
    ledger = ReservationLedger(clock=clock)
    catalog = SlotCatalog(times=("09:00", "10:00"), groomers=("Groomer 1", "Groomer 2"))

    app.dependency_overrides[get_booking_store] = lambda: store
    app.dependency_overrides[get_reservation_ledger] = lambda: ledger
    app.dependency_overrides[get_catalog] = lambda: catalog
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _booking_body(**overrides):
    body = {
        "serviceType": "grooming",
        "groomingService": "Full Groom",
        "appointmentDate": DAY,
        "appointmentTime": "09:00",
        "groomer": "Groomer 1",
        "petName": "Biscuit",
        "petBreed": "Corgi",
        "petSize": "medium",
        "addOnServices": ["Nail Trim"],
        "customerName": "Dana Smith",
        "customerPhone": "555-0100",
        "customerEmail": "dana@example.com",
    }
    body.update(overrides)
    return body


def _slots(client):
    resp = client.get("/api/availability", params={"date": DAY})
    assert resp.status_code == 200
    return {(s["time"], s["groomer"]): s["available"] for s in resp.json()["availableTimeSlots"]}


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}


def test_reserve_book_and_cancel_flow(api):
    assert all(_slots(api).values())
    assert len(_slots(api)) == 4

    resp = api.post(
        "/api/reservations",
        json={"appointmentDate": DAY, "appointmentTime": "09:00", "groomer": "Groomer 1"},
    )
    assert resp.status_code == 201
    reservation = resp.json()
    assert reservation["success"] is True
    assert reservation["expiresIn"] == 600
    hold_id = reservation["reservationId"]

    slots = _slots(api)
    assert slots[("09:00", "Groomer 1")] is False
    assert slots[("09:00", "Groomer 2")] is True

    resp = api.post(
        "/api/reservations",
        json={"appointmentDate": DAY, "appointmentTime": "09:00", "groomer": "Groomer 1"},
    )
    assert resp.status_code == 409
    assert resp.json()["errorCode"] == "SLOT_UNAVAILABLE"

    resp = api.post("/api/bookings", json=_booking_body())
    assert resp.status_code == 409
    assert resp.json()["success"] is False

    resp = api.post("/api/bookings", json=_booking_body(reservationId=hold_id))
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["appointmentTime"] == "09:00"
    assert data["groomer"] == "Groomer 1"
    assert data["addOnServices"] == ["Nail Trim"]
    assert data["reference"].startswith("NVP-G-")

    assert api.get(f"/api/reservations/{hold_id}").status_code == 404
    assert _slots(api)[("09:00", "Groomer 1")] is False

    resp = api.put(f"/api/bookings/{data['id']}/status", json={"status": "cancelled"})
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "cancelled"
    assert _slots(api)[("09:00", "Groomer 1")] is True

    listing = api.get("/api/bookings", params={"date": DAY}).json()
    assert listing["count"] == 1


def test_expired_hold_is_rejected(api, clock):
    hold_id = api.post(
        "/api/reservations",
        json={"appointmentDate": DAY, "appointmentTime": "10:00", "groomer": "Groomer 2", "holdType": "browse"},
    ).json()["reservationId"]

    clock.advance(301)

    resp = api.post("/api/bookings", json=_booking_body(appointmentTime="10:00", groomer="Groomer 2", reservationId=hold_id))
    assert resp.status_code == 409
    assert resp.json()["errorCode"] == "SLOT_UNAVAILABLE"


def test_reservation_lookup_and_cancel(api, clock):
    hold_id = api.post(
        "/api/reservations",
        json={"appointmentDate": DAY, "appointmentTime": "10:00", "groomer": "Groomer 1"},
    ).json()["reservationId"]
    clock.advance(60)

    resp = api.get(f"/api/reservations/{hold_id}")
    assert resp.status_code == 200
    assert resp.json()["expiresIn"] == 540

    assert api.delete(f"/api/reservations/{hold_id}").status_code == 204
    assert api.delete(f"/api/reservations/{hold_id}").status_code == 404
    assert _slots(api)[("10:00", "Groomer 1")] is True


def test_booking_validation_errors(api):
    resp = api.post("/api/bookings", json=_booking_body(customerEmail="nope", petName=""))

    assert resp.status_code == 400
    body = resp.json()
    assert body["errorCode"] == "VALIDATION_ERROR"
    assert set(body["errors"]) == {"customerEmail", "petName"}


def test_malformed_body_is_a_400(api):
    resp = api.post("/api/bookings", json=_booking_body(addOnServices="Nail Trim"))

    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation error"


def test_availability_requires_date(api):
    resp = api.get("/api/availability")

    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_availability_fails_open(api):
    app.dependency_overrides[get_booking_store] = lambda: OfflineStore()

    resp = api.get("/api/availability", params={"date": DAY, "forceRefresh": "true"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["degraded"] is True
    assert "sheets unreachable" in body["error"]
    assert all(s["available"] for s in body["availableTimeSlots"])


def test_booking_store_outage_is_a_503(api):
    app.dependency_overrides[get_booking_store] = lambda: OfflineStore()

    resp = api.post("/api/bookings", json=_booking_body())

    assert resp.status_code == 503
    assert resp.json()["errorCode"] == "STORE_ERROR"


def test_admin_endpoints_require_token(api, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_API_TOKEN", "s3cret")

    assert api.get("/api/bookings").status_code == 401
    assert api.get("/api/bookings", headers={"X-Admin-Token": "wrong"}).status_code == 401
    assert api.get("/api/bookings", headers={"X-Admin-Token": "s3cret"}).status_code == 200
    assert api.get("/api/bookings/7", headers={"X-Admin-Token": "s3cret"}).status_code == 404


def test_status_update_rejects_unknown_status(api):
    booking_id = api.post("/api/bookings", json=_booking_body()).json()["data"]["id"]

    resp = api.put(f"/api/bookings/{booking_id}/status", json={"status": "archived"})

    assert resp.status_code == 400
    assert api.put("/api/bookings/99/status", json={"status": "cancelled"}).status_code == 404
