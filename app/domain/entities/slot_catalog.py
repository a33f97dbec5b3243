from __future__ import annotations

from dataclasses import dataclass

from app.domain.entities.booking import Booking
from app.domain.entities.slot import SlotKey


@dataclass(frozen=True)
class SlotCatalog:
    """Fixed daily times crossed with fixed groomers; the universe of bookable slots."""

    times: tuple[str, ...]
    groomers: tuple[str, ...]
    service_type: str = "grooming"

    def __post_init__(self) -> None:
        if not self.times:
            raise ValueError("SlotCatalog requires at least one time slot")
        if not self.groomers:
            raise ValueError("SlotCatalog requires at least one groomer")

    @property
    def default_groomer(self) -> str:
        return self.groomers[0]

    def all_slots(self, date: str) -> list[SlotKey]:
        return [SlotKey(date=date, time=time, groomer=groomer) for time in self.times for groomer in self.groomers]

    def match_groomer(self, name: str | None) -> str | None:
        """Return the configured spelling of `name`, or None if it is not a known groomer."""
        if not name or not name.strip():
            return None
        wanted = name.strip().lower()
        for groomer in self.groomers:
            if groomer.lower() == wanted:
                return groomer
        return None

    def resolve_groomer(self, name: str | None) -> str:
        """Like match_groomer, but missing or unknown names fall back to the default groomer."""
        return self.match_groomer(name) or self.default_groomer

    def has_time(self, time: str) -> bool:
        return time in self.times

    def covers_service(self, service_type: str | None) -> bool:
        """Blank service types count as this catalog's own."""
        return ((service_type or "").strip().lower() or self.service_type) == self.service_type

    def is_occupied_by(self, booking: Booking) -> bool:
        """True when `booking` blocks one of this catalog's slots, whatever its date."""
        return booking.occupies_slot and self.covers_service(booking.service_type)
