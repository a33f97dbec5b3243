from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo

from app.application.ports.booking_store import BookingStorePort
from app.application.utils.time_normalizer import normalize_date, normalize_time
from app.domain.entities.booking import Booking
from app.domain.entities.slot import AvailabilitySlot, SlotKey
from app.domain.entities.slot_catalog import SlotCatalog
from app.infrastructure.reservations.reservation_ledger import ReservationLedger


@dataclass(frozen=True)
class AvailabilityResult:
    date: str
    slots: list[AvailabilitySlot]
    error: str | None = None  # set when the store read failed and the result is fail-open

    @property
    def degraded(self) -> bool:
        return self.error is not None

    def find(self, slot: SlotKey) -> AvailabilitySlot | None:
        for entry in self.slots:
            if entry.slot.key == slot.key:
                return entry
        return None


class AvailabilityUseCase:
    def __init__(
        self,
        store: BookingStorePort,
        ledger: ReservationLedger,
        catalog: SlotCatalog,
        timezone: tzinfo | None = None,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._catalog = catalog
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def get_availability(self, date: str, force_refresh: bool = False) -> AvailabilityResult:
        """
        Availability matrix for one day: confirmed/expired bookings from the store
        plus live holds from the ledger. Store failures never propagate; the
        whole catalog is reported available and the error is attached instead.
        """
        normalized_date = normalize_date(date, self._timezone)

        try:
            bookings = self._store.list_bookings(date=normalized_date, force_refresh=force_refresh)
        except Exception as e:
            self._logger.error(
                "Booking store read failed, serving fail-open availability",
                extra={"date": normalized_date, "error": str(e)},
            )
            return AvailabilityResult(
                date=normalized_date,
                slots=[AvailabilitySlot(slot=slot, available=True) for slot in self._catalog.all_slots(normalized_date)],
                error=str(e) or e.__class__.__name__,
            )

        occupied: dict[str, set[str]] = {groomer: set() for groomer in self._catalog.groomers}

        for booking in bookings:
            if not self._occupies_catalog_slot(booking, normalized_date):
                continue
            groomer = self._catalog.resolve_groomer(booking.groomer)
            occupied[groomer].add(normalize_time(booking.appointment_time))

        for held in self._ledger.active_slots_for_date(normalized_date):
            groomer = self._catalog.resolve_groomer(held.groomer)
            occupied[groomer].add(held.time)

        slots = [
            AvailabilitySlot(slot=slot, available=slot.time not in occupied[slot.groomer])
            for slot in self._catalog.all_slots(normalized_date)
        ]
        self._logger.debug(
            "Availability resolved",
            extra={"date": normalized_date, "reason": f"available={sum(s.available for s in slots)}/{len(slots)}"},
        )
        return AvailabilityResult(date=normalized_date, slots=slots)

    def _occupies_catalog_slot(self, booking: Booking, date: str) -> bool:
        if normalize_date(booking.appointment_date, self._timezone) != date:
            return False
        return self._catalog.is_occupied_by(booking)
