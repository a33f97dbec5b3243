from __future__ import annotations

from typing import Any, Callable

import pytest

from app.application.dto.booking_request import BookingRequestDTO
from app.application.use_cases.availability import AvailabilityUseCase
from app.application.use_cases.booking import BookingUseCase
from app.application.use_cases.reservations import ReservationUseCase
from app.domain.entities.booking import Booking
from app.domain.entities.slot_catalog import SlotCatalog
from app.infrastructure.reservations.reservation_ledger import ReservationLedger
from app.infrastructure.store.memory_store import MemoryBookingStore

DAY = "2025-06-01"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def catalog() -> SlotCatalog:
    return SlotCatalog(times=("09:00", "10:00"), groomers=("Groomer 1", "Groomer 2"))


@pytest.fixture
def ledger(clock: FakeClock) -> ReservationLedger:
    return ReservationLedger(clock=clock)


@pytest.fixture
def store() -> MemoryBookingStore:
    return MemoryBookingStore()


@pytest.fixture
def availability(store, ledger, catalog) -> AvailabilityUseCase:
    return AvailabilityUseCase(store=store, ledger=ledger, catalog=catalog)


@pytest.fixture
def reservations(ledger, availability, catalog) -> ReservationUseCase:
    return ReservationUseCase(ledger=ledger, availability=availability, catalog=catalog)


@pytest.fixture
def booking_use_case(store, ledger, availability, catalog, clock) -> BookingUseCase:
    return BookingUseCase(store=store, ledger=ledger, availability=availability, catalog=catalog, clock=clock)


@pytest.fixture
def make_request() -> Callable[..., BookingRequestDTO]:
    def _make(**overrides: Any) -> BookingRequestDTO:
        payload = {
            "serviceType": "grooming",
            "groomingService": "Full Groom",
            "appointmentDate": DAY,
            "appointmentTime": "09:00",
            "groomer": "Groomer 1",
            "petName": "Biscuit",
            "petBreed": "Corgi",
            "petSize": "medium",
            "addOnServices": ["Nail Trim", "Teeth Brushing"],
            "customerName": "Dana Smith",
            "customerPhone": "555-0100",
            "customerEmail": "dana@example.com",
        }
        payload.update(overrides)
        return BookingRequestDTO.model_validate(payload)

    return _make


@pytest.fixture
def make_booking() -> Callable[..., Booking]:
    def _make(id: int = 1, **overrides: Any) -> Booking:
        fields = {
            "id": id,
            "appointment_date": DAY,
            "appointment_time": "09:00",
            "groomer": "Groomer 1",
            "service_type": "grooming",
            "grooming_service": "Full Groom",
            "pet_name": "Biscuit",
            "pet_breed": "Corgi",
            "pet_size": "medium",
            "customer_name": "Dana Smith",
            "customer_email": "dana@example.com",
            "customer_phone": "555-0100",
            "status": "confirmed",
            "created_at": f"2025-05-01T10:00:{id:02d}+00:00",
        }
        fields.update(overrides)
        return Booking(**fields)

    return _make
