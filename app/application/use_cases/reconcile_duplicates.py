from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo

from app.application.ports.booking_store import BookingStorePort
from app.application.utils.time_normalizer import normalize_date, normalize_time
from app.domain.entities.booking import Booking, BookingStatus
from app.domain.entities.slot import SlotKey
from app.domain.entities.slot_catalog import SlotCatalog


@dataclass(frozen=True)
class DuplicateGroup:
    slot: SlotKey
    kept_id: int
    cancelled_ids: list[int]


class ReconcileDuplicatesUseCase:
    """Cancel all but the oldest slot-occupying booking for each doubly booked slot."""

    def __init__(self, store: BookingStorePort, catalog: SlotCatalog, timezone: tzinfo | None = None) -> None:
        self._store = store
        self._catalog = catalog
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def execute(self, date: str | None = None, dry_run: bool = False) -> list[DuplicateGroup]:
        bookings = self._store.list_bookings(date=date, force_refresh=True)

        by_slot: dict[str, tuple[SlotKey, list[Booking]]] = {}
        for booking in bookings:
            # Hotel and daycare rows share the sheet but never a grooming slot.
            if not self._catalog.is_occupied_by(booking):
                continue
            slot = SlotKey(
                date=normalize_date(booking.appointment_date, self._timezone),
                time=normalize_time(booking.appointment_time),
                groomer=self._catalog.resolve_groomer(booking.groomer),
            )
            by_slot.setdefault(slot.key, (slot, []))[1].append(booking)

        groups: list[DuplicateGroup] = []
        for slot, members in by_slot.values():
            if len(members) < 2:
                continue
            members.sort(key=lambda b: (b.created_at or "", b.id))
            keep, *extra = members
            group = DuplicateGroup(slot=slot, kept_id=keep.id, cancelled_ids=[b.id for b in extra])
            groups.append(group)

            self._logger.warning(
                "Duplicate bookings found",
                extra={
                    "date": slot.date,
                    "time": slot.time,
                    "groomer": slot.groomer,
                    "booking_id": keep.id,
                    "reason": f"cancelling={group.cancelled_ids} dry_run={dry_run}",
                },
            )
            if dry_run:
                continue
            for booking_id in group.cancelled_ids:
                self._store.update_booking_status(booking_id, BookingStatus.CANCELLED.value)

        return groups
