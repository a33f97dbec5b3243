from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, fields, replace
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Any

from app.application.exceptions import BookingNotFound
from app.application.ports.booking_store import BookingStorePort
from app.application.utils.time_normalizer import normalize_date
from app.domain.entities.booking import Booking, NewBooking

BOOKING_FIELDS = {f.name for f in fields(Booking)}


class JsonBookingStore(BookingStorePort):
    """Single-file booking store for local development."""

    def __init__(self, path: str = "./data/bookings.json", timezone: tzinfo | None = None) -> None:
        self._path = Path(path)
        self._timezone = timezone
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def list_bookings(
        self,
        date: str | None = None,
        status: str | None = None,
        force_refresh: bool = False,
    ) -> list[Booking]:
        with self._lock:
            data = self._load()
        bookings = [self._deserialize(row) for row in data["bookings"]]
        if date:
            bookings = [b for b in bookings if normalize_date(b.appointment_date, self._timezone) == date]
        if status:
            bookings = [b for b in bookings if (b.status or "").lower() == status.lower()]
        return bookings

    def get_booking(self, booking_id: int) -> Booking | None:
        for booking in self.list_bookings():
            if booking.id == booking_id:
                return booking
        return None

    def insert_booking(self, booking: NewBooking) -> Booking:
        with self._lock:
            data = self._load()
            saved = booking.persisted(id=data["next_id"], created_at=datetime.now(timezone.utc).isoformat())
            data["bookings"].append(asdict(saved))
            data["next_id"] = saved.id + 1
            self._save(data)
        return saved

    def update_booking_status(self, booking_id: int, status: str) -> Booking:
        with self._lock:
            data = self._load()
            for index, row in enumerate(data["bookings"]):
                if row.get("id") == booking_id:
                    updated = replace(self._deserialize(row), status=status)
                    data["bookings"][index] = asdict(updated)
                    self._save(data)
                    return updated
        raise BookingNotFound(f"Booking {booking_id} not found")

    def _load(self) -> dict[str, Any]:
        """Load the store file, returning an empty store if it does not exist yet."""
        if not self._path.exists():
            return {"bookings": [], "next_id": 1, "version": 1}
        with open(self._path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data.setdefault("bookings", [])
        data.setdefault("next_id", max((row.get("id", 0) for row in data["bookings"]), default=0) + 1)
        data.setdefault("version", 1)
        return data

    def _save(self, data: dict[str, Any]) -> None:
        """Write the store file atomically."""
        temp_path = self._path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._path)
        except Exception:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    self._logger.warning("Could not remove temp file", extra={"reason": str(temp_path)})
            raise

    def _deserialize(self, row: dict[str, Any]) -> Booking:
        return Booking(**{key: value for key, value in row.items() if key in BOOKING_FIELDS})
