from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo

from app.application.exceptions import ReservationNotFound, SlotUnavailable, ValidationError
from app.application.use_cases.availability import AvailabilityUseCase
from app.application.utils.time_normalizer import ISO_DATE_RE, normalize_date, normalize_time
from app.domain.entities.hold import Hold
from app.domain.entities.slot import SlotKey
from app.domain.entities.slot_catalog import SlotCatalog
from app.infrastructure.reservations.reservation_ledger import ReservationLedger

HOLD_TYPES = ("browse", "checkout")


@dataclass(frozen=True)
class ReservationView:
    hold: Hold
    expires_in: int


class ReservationUseCase:
    def __init__(
        self,
        ledger: ReservationLedger,
        availability: AvailabilityUseCase,
        catalog: SlotCatalog,
        browse_ttl_seconds: int = 300,
        checkout_ttl_seconds: int = 600,
        timezone: tzinfo | None = None,
    ) -> None:
        self._ledger = ledger
        self._availability = availability
        self._catalog = catalog
        self._ttls = {"browse": browse_ttl_seconds, "checkout": checkout_ttl_seconds}
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def reserve(
        self,
        appointment_date: str | None,
        appointment_time: str | None,
        groomer: str | None,
        hold_type: str = "checkout",
    ) -> ReservationView:
        slot, ttl_seconds = self._parse(appointment_date, appointment_time, groomer, hold_type)

        # The store read happens before touching the ledger lock.
        entry = self._availability.get_availability(slot.date).find(slot)
        if entry is None or not entry.available:
            raise SlotUnavailable("This slot is no longer available. Please pick another slot.")

        hold = self._ledger.create(slot, ttl_seconds)
        if hold is None:
            raise SlotUnavailable("Someone else is booking this slot right now. Please pick another slot.")
        return ReservationView(hold=hold, expires_in=ttl_seconds)

    def get(self, reservation_id: str) -> ReservationView:
        hold = self._ledger.get(reservation_id)
        if hold is None:
            raise ReservationNotFound("Reservation not found or expired")
        return ReservationView(hold=hold, expires_in=hold.remaining_seconds(self._ledger.now()))

    def cancel(self, reservation_id: str) -> None:
        if not self._ledger.remove_by_id(reservation_id):
            raise ReservationNotFound("Reservation not found or expired")
        self._logger.info("Hold cancelled", extra={"reservation_id": reservation_id})

    def _parse(
        self,
        appointment_date: str | None,
        appointment_time: str | None,
        groomer: str | None,
        hold_type: str,
    ) -> tuple[SlotKey, int]:
        errors: dict[str, str] = {}

        date = normalize_date(appointment_date or "", self._timezone)
        if not ISO_DATE_RE.match(date):
            errors["appointmentDate"] = "Please select a date"
        time = normalize_time(appointment_time or "")
        if not self._catalog.has_time(time):
            errors["appointmentTime"] = "Please select a time slot"

        resolved_groomer = self._catalog.default_groomer
        if groomer and groomer.strip():
            matched = self._catalog.match_groomer(groomer)
            if matched is None:
                errors["groomer"] = "Unknown groomer"
            else:
                resolved_groomer = matched

        if hold_type not in HOLD_TYPES:
            errors["holdType"] = f"Must be one of: {', '.join(HOLD_TYPES)}"

        if errors:
            raise ValidationError("Validation error", errors)
        return SlotKey(date=date, time=time, groomer=resolved_groomer), self._ttls[hold_type]
