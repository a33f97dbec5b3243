from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum

from app.domain.entities.slot import SlotKey


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class ServiceType(str, Enum):
    GROOMING = "grooming"
    HOTEL = "hotel"
    DAYCARE = "daycare"


class PetSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    GIANT = "giant"


# Statuses that keep a slot occupied.
OCCUPYING_STATUSES = frozenset({BookingStatus.CONFIRMED.value, BookingStatus.EXPIRED.value})


@dataclass(frozen=True, kw_only=True)
class NewBooking:
    appointment_date: str
    appointment_time: str
    groomer: str | None
    service_type: str
    pet_name: str
    pet_breed: str
    pet_size: str
    customer_name: str
    customer_email: str
    customer_phone: str
    status: str = BookingStatus.CONFIRMED.value
    grooming_service: str | None = None
    add_on_services: str | None = None  # comma-separated
    special_requests: str | None = None
    reference: str | None = None

    def persisted(self, id: int, created_at: str) -> Booking:
        values = {f.name: getattr(self, f.name) for f in fields(NewBooking)}
        return Booking(**values, id=id, created_at=created_at)


@dataclass(frozen=True, kw_only=True)
class Booking(NewBooking):
    id: int
    created_at: str  # ISO timestamp

    @property
    def slot(self) -> SlotKey:
        return SlotKey(date=self.appointment_date, time=self.appointment_time, groomer=self.groomer or "")

    @property
    def occupies_slot(self) -> bool:
        return (self.status or "").strip().lower() in OCCUPYING_STATUSES
