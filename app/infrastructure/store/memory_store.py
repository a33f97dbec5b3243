from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone, tzinfo

from app.application.exceptions import BookingNotFound, DuplicateSlotError
from app.application.ports.booking_store import BookingStorePort
from app.application.utils.time_normalizer import normalize_date, normalize_time
from app.domain.entities.booking import OCCUPYING_STATUSES, Booking, NewBooking, ServiceType


class MemoryBookingStore(BookingStorePort):
    def __init__(
        self,
        bookings: list[Booking] | None = None,
        enforce_unique_slots: bool = True,
        timezone: tzinfo | None = None,
    ) -> None:
        self._bookings: dict[int, Booking] = {b.id: b for b in bookings or []}
        self._next_id = max(self._bookings, default=0) + 1
        self._enforce_unique_slots = enforce_unique_slots
        self._timezone = timezone
        self._lock = threading.Lock()

    def list_bookings(
        self,
        date: str | None = None,
        status: str | None = None,
        force_refresh: bool = False,
    ) -> list[Booking]:
        with self._lock:
            bookings = list(self._bookings.values())
        if date:
            bookings = [b for b in bookings if normalize_date(b.appointment_date, self._timezone) == date]
        if status:
            bookings = [b for b in bookings if (b.status or "").lower() == status.lower()]
        return bookings

    def get_booking(self, booking_id: int) -> Booking | None:
        with self._lock:
            return self._bookings.get(booking_id)

    def insert_booking(self, booking: NewBooking) -> Booking:
        with self._lock:
            if self._enforce_unique_slots and booking.status in OCCUPYING_STATUSES:
                for existing in self._bookings.values():
                    if existing.occupies_slot and self._same_slot(existing, booking):
                        raise DuplicateSlotError(
                            f"Slot {booking.appointment_date} {booking.appointment_time} "
                            f"with {booking.groomer} is already booked"
                        )
            saved = booking.persisted(id=self._next_id, created_at=datetime.now(timezone.utc).isoformat())
            self._bookings[saved.id] = saved
            self._next_id += 1
            return saved

    def update_booking_status(self, booking_id: int, status: str) -> Booking:
        with self._lock:
            existing = self._bookings.get(booking_id)
            if existing is None:
                raise BookingNotFound(f"Booking {booking_id} not found")
            updated = replace(existing, status=status)
            self._bookings[booking_id] = updated
            return updated

    def _same_slot(self, a: NewBooking, b: NewBooking) -> bool:
        return (
            _service(a) == _service(b)
            and normalize_date(a.appointment_date, self._timezone) == normalize_date(b.appointment_date, self._timezone)
            and normalize_time(a.appointment_time) == normalize_time(b.appointment_time)
            and (a.groomer or "").strip().lower() == (b.groomer or "").strip().lower()
        )


def _service(booking: NewBooking) -> str:
    return (booking.service_type or "").strip().lower() or ServiceType.GROOMING.value
