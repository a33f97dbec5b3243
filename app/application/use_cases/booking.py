from __future__ import annotations

import logging
import re
import time
from dataclasses import replace
from datetime import tzinfo
from typing import Callable

from app.application.dto.booking_request import BookingRequestDTO
from app.application.exceptions import (
    BookingNotFound,
    DuplicateSlotError,
    SlotUnavailable,
    StoreError,
    ValidationError,
)
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.notifier import NotifierPort
from app.application.use_cases.availability import AvailabilityUseCase
from app.application.utils.time_normalizer import ISO_DATE_RE, normalize_date, normalize_time
from app.domain.entities.booking import Booking, BookingStatus, NewBooking, PetSize
from app.domain.entities.slot import SlotKey
from app.domain.entities.slot_catalog import SlotCatalog
from app.infrastructure.reservations.reservation_ledger import ReservationLedger

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

SLOT_TAKEN_MESSAGE = "This time slot was just taken. Please pick another slot."
HOLD_EXPIRED_MESSAGE = "Your hold on this slot expired. Please pick another slot."

REFERENCE_SPACE = 1_000_000


class BookingUseCase:
    def __init__(
        self,
        store: BookingStorePort,
        ledger: ReservationLedger,
        availability: AvailabilityUseCase,
        catalog: SlotCatalog,
        notifier: NotifierPort | None = None,
        timezone: tzinfo | None = None,
        reference_prefix: str = "NVP",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._availability = availability
        self._catalog = catalog
        self._notifier = notifier
        self._timezone = timezone
        self._reference_prefix = reference_prefix
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def create_booking(self, request: BookingRequestDTO) -> Booking:
        """
        Validate, check the slot, commit to the store and release the hold.

        With a reservation id the hold alone vouches for the slot; without one the
        availability matrix and a direct store scan must both agree it is free.
        A failed insert leaves the hold in place so the client can retry.
        """
        new_booking, slot = self._build_booking(request)
        hold_id = (request.reservation_id or "").strip() or None

        if hold_id:
            if not self._ledger.validate(slot, hold_id):
                self._logger.info(
                    "Booking rejected, hold invalid or expired",
                    extra={"reservation_id": hold_id, "date": slot.date, "time": slot.time, "groomer": slot.groomer},
                )
                raise SlotUnavailable(HOLD_EXPIRED_MESSAGE)
        else:
            self._ensure_slot_free(slot)

        new_booking = replace(new_booking, reference=self._next_reference())
        try:
            booking = self._store.insert_booking(new_booking)
        except DuplicateSlotError as e:
            self._logger.info(
                "Booking rejected by store uniqueness constraint",
                extra={"date": slot.date, "time": slot.time, "groomer": slot.groomer, "error": str(e)},
            )
            raise SlotUnavailable(SLOT_TAKEN_MESSAGE) from e
        except Exception as e:
            self._logger.error(
                "Booking store insert failed",
                extra={"reservation_id": hold_id, "date": slot.date, "time": slot.time, "error": str(e)},
            )
            raise StoreError("Could not save the booking. Please try again.") from e

        if hold_id:
            self._ledger.remove(slot)

        self._logger.info(
            "Booking created",
            extra={
                "booking_id": booking.id,
                "reservation_id": hold_id,
                "date": booking.appointment_date,
                "time": booking.appointment_time,
                "groomer": booking.groomer,
                "status": booking.status,
            },
        )
        return booking

    def update_booking_status(self, booking_id: int, status: str) -> Booking:
        # No transition table: any status may move to any other.
        normalized = (status or "").strip().lower()
        allowed = {s.value for s in BookingStatus}
        if normalized not in allowed:
            raise ValidationError(
                "Invalid booking status",
                {"status": f"Must be one of: {', '.join(sorted(allowed))}"},
            )

        existing = self.get_booking(booking_id)
        try:
            updated = self._store.update_booking_status(booking_id, normalized)
        except BookingNotFound:
            raise
        except Exception as e:
            self._logger.error("Booking status update failed", extra={"booking_id": booking_id, "error": str(e)})
            raise StoreError("Could not update the booking status.") from e

        self._logger.info(
            "Booking status changed",
            extra={"booking_id": booking_id, "status": f"{existing.status}->{updated.status}"},
        )
        return updated

    def get_booking(self, booking_id: int) -> Booking:
        try:
            booking = self._store.get_booking(booking_id)
        except Exception as e:
            raise StoreError("Could not load the booking.") from e
        if booking is None:
            raise BookingNotFound(f"Booking {booking_id} not found")
        return booking

    def list_bookings(self, date: str | None = None, status: str | None = None) -> list[Booking]:
        if date:
            date = normalize_date(date, self._timezone)
        try:
            return self._store.list_bookings(date=date, status=status, force_refresh=True)
        except Exception as e:
            raise StoreError("Could not load bookings.") from e

    def notify_booking_confirmed(self, booking: Booking) -> None:
        """Fire-and-forget notification; failures are logged, never raised."""
        if self._notifier is None:
            return
        try:
            self._notifier.booking_confirmed(booking)
        except Exception as e:
            self._logger.error("Booking notification failed", extra={"booking_id": booking.id, "error": str(e)})

    def _ensure_slot_free(self, slot: SlotKey) -> None:
        availability = self._availability.get_availability(slot.date, force_refresh=True)
        entry = availability.find(slot)
        if entry is None or not entry.available:
            self._logger.info(
                "Booking rejected, slot unavailable",
                extra={"date": slot.date, "time": slot.time, "groomer": slot.groomer},
            )
            raise SlotUnavailable(SLOT_TAKEN_MESSAGE)

        # Second look straight at the store, for rows the snapshot above missed.
        try:
            existing = self._store.list_bookings(date=slot.date, force_refresh=True)
        except Exception as e:
            self._logger.error("Booking store recheck failed", extra={"date": slot.date, "error": str(e)})
            raise StoreError("Could not verify the slot. Please try again.") from e

        for booking in existing:
            if not self._catalog.is_occupied_by(booking):
                continue
            if (
                normalize_date(booking.appointment_date, self._timezone) == slot.date
                and normalize_time(booking.appointment_time) == slot.time
                and self._catalog.resolve_groomer(booking.groomer) == slot.groomer
            ):
                self._logger.info(
                    "Race detected, slot booked during checkout",
                    extra={"booking_id": booking.id, "date": slot.date, "time": slot.time, "groomer": slot.groomer},
                )
                raise SlotUnavailable(SLOT_TAKEN_MESSAGE)

    def _build_booking(self, request: BookingRequestDTO) -> tuple[NewBooking, SlotKey]:
        errors: dict[str, str] = {}

        service_type = (request.service_type or self._catalog.service_type).strip().lower()
        if service_type != self._catalog.service_type:
            errors["serviceType"] = f"Only {self._catalog.service_type} appointments can be booked"
        if not _filled(request.grooming_service):
            errors["groomingService"] = "Please select a grooming service"

        appointment_date = normalize_date(request.appointment_date or "", self._timezone)
        if not ISO_DATE_RE.match(appointment_date):
            errors["appointmentDate"] = "Please select a date"

        appointment_time = normalize_time(request.appointment_time or "")
        if not self._catalog.has_time(appointment_time):
            errors["appointmentTime"] = "Please select a time slot"

        groomer = self._catalog.default_groomer
        if _filled(request.groomer):
            matched = self._catalog.match_groomer(request.groomer)
            if matched is None:
                errors["groomer"] = "Unknown groomer"
            else:
                groomer = matched

        if not _filled(request.pet_name):
            errors["petName"] = "Please enter your pet's name"
        if not _filled(request.pet_breed):
            errors["petBreed"] = "Please enter your pet's breed"
        pet_size = (request.pet_size or "").strip().lower()
        if pet_size not in {s.value for s in PetSize}:
            errors["petSize"] = "Please select your pet's size"

        if not _filled(request.customer_name):
            errors["customerName"] = "Please enter your name"
        if len((request.customer_phone or "").strip()) < 6:
            errors["customerPhone"] = "Please enter a valid phone number"
        if not EMAIL_RE.match((request.customer_email or "").strip()):
            errors["customerEmail"] = "Please enter a valid email address"

        if errors:
            raise ValidationError("Validation error", errors)

        booking = NewBooking(
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            groomer=groomer,
            service_type=service_type,
            grooming_service=request.grooming_service.strip(),
            pet_name=request.pet_name.strip(),
            pet_breed=request.pet_breed.strip(),
            pet_size=pet_size,
            add_on_services=", ".join(request.add_on_services) or None,
            special_requests=(request.special_requests or "").strip() or None,
            customer_name=request.customer_name.strip(),
            customer_email=request.customer_email.strip(),
            customer_phone=request.customer_phone.strip(),
            status=BookingStatus.CONFIRMED.value,
        )
        return booking, SlotKey(date=appointment_date, time=appointment_time, groomer=groomer)

    def _next_reference(self) -> str:
        """`<PREFIX>-G-` plus six clock digits, stepped past any reference already in the store."""
        try:
            taken = {b.reference for b in self._store.list_bookings() if b.reference}
        except Exception as e:
            self._logger.error("Booking reference lookup failed", extra={"error": str(e)})
            raise StoreError("Could not save the booking. Please try again.") from e

        millis = int(self._clock() * 1000)
        for step in range(REFERENCE_SPACE):
            candidate = f"{self._reference_prefix}-G-{(millis + step) % REFERENCE_SPACE:06d}"
            if candidate not in taken:
                return candidate
        raise StoreError("No booking references left for this prefix.")


def _filled(value: str | None) -> bool:
    return bool(value and value.strip())
