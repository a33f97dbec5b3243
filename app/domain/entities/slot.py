from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SlotKey:
    date: str  # YYYY-MM-DD
    time: str  # HH:MM, 24h
    groomer: str

    @property
    def key(self) -> str:
        """Composite lookup key; groomer compared case-insensitively."""
        return f"{self.date}|{self.time}|{self.groomer.strip().lower()}"


@dataclass(frozen=True)
class AvailabilitySlot:
    slot: SlotKey
    available: bool
