from __future__ import annotations

import logging
import secrets
import threading
import time
from datetime import tzinfo
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from app.application.utils.time_normalizer import normalize_date, normalize_time
from app.domain.entities.hold import Hold
from app.domain.entities.slot import SlotKey


class ReservationLedger:
    """
    In-memory store of short-lived slot holds.

    At most one live hold exists per slot key. All operations run under a single
    lock and never raise; expired holds are evicted lazily on access and
    periodically by the background sweep.
    """

    def __init__(
        self,
        timezone: tzinfo | None = None,
        clock: Callable[[], float] = time.time,
        sweep_interval_seconds: int = 60,
    ) -> None:
        self._timezone = timezone
        self._clock = clock
        self._sweep_interval_seconds = sweep_interval_seconds
        self._holds: dict[str, Hold] = {}
        self._keys_by_id: dict[str, str] = {}
        self._lock = threading.Lock()
        self._scheduler: BackgroundScheduler | None = None
        self._logger = logging.getLogger(__name__)

    def now(self) -> float:
        return self._clock()

    def normalize_slot(self, slot: SlotKey) -> SlotKey:
        return SlotKey(
            date=normalize_date(slot.date, self._timezone),
            time=normalize_time(slot.time),
            groomer=slot.groomer.strip(),
        )

    def create(self, slot: SlotKey, ttl_seconds: int, replace: bool = False) -> Hold | None:
        """
        Place a hold on a slot. Returns None when another live hold already
        occupies the slot, unless replace=True.
        """
        slot = self.normalize_slot(slot)
        with self._lock:
            now = self._clock()
            existing = self._holds.get(slot.key)
            if existing is not None:
                if existing.is_expired(now):
                    self._evict(slot.key)
                elif not replace:
                    self._logger.info(
                        "Hold rejected, slot already held",
                        extra={"reservation_id": existing.id, "date": slot.date, "time": slot.time, "groomer": slot.groomer},
                    )
                    return None
                else:
                    self._evict(slot.key)

            hold = Hold(id=secrets.token_urlsafe(16), slot=slot, created_at=now, ttl_seconds=ttl_seconds)
            self._holds[slot.key] = hold
            self._keys_by_id[hold.id] = slot.key

        self._logger.info(
            "Hold created",
            extra={"reservation_id": hold.id, "date": slot.date, "time": slot.time, "groomer": slot.groomer},
        )
        return hold

    def validate(self, slot: SlotKey, hold_id: str) -> bool:
        slot = self.normalize_slot(slot)
        with self._lock:
            hold = self._holds.get(slot.key)
            if hold is None:
                return False
            if hold.is_expired(self._clock()):
                self._evict(slot.key)
                self._logger.info("Hold expired on validate", extra={"reservation_id": hold.id})
                return False
            return hold.id == hold_id

    def get(self, hold_id: str) -> Hold | None:
        """Look up a live hold by id; an expired hold is evicted and reported as absent."""
        with self._lock:
            key = self._keys_by_id.get(hold_id)
            if key is None:
                return None
            hold = self._holds[key]
            if hold.is_expired(self._clock()):
                self._evict(key)
                return None
            return hold

    def remove(self, slot: SlotKey) -> bool:
        slot = self.normalize_slot(slot)
        with self._lock:
            return self._evict(slot.key) is not None

    def remove_by_id(self, hold_id: str) -> bool:
        with self._lock:
            key = self._keys_by_id.get(hold_id)
            if key is None:
                return False
            return self._evict(key) is not None

    def sweep(self) -> int:
        """Evict every expired hold. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, hold in self._holds.items() if hold.is_expired(now)]
            for key in expired:
                self._evict(key)
        if expired:
            self._logger.info("Expired holds swept", extra={"reason": f"removed={len(expired)}"})
        return len(expired)

    def active_slots_for_date(self, date: str) -> set[SlotKey]:
        date = normalize_date(date, self._timezone)
        with self._lock:
            now = self._clock()
            return {
                hold.slot
                for hold in self._holds.values()
                if hold.slot.date == date and not hold.is_expired(now)
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._holds)

    # Background sweep

    def start(self) -> None:
        if self._scheduler is not None:
            return
        scheduler = BackgroundScheduler(daemon=True)
        scheduler.add_job(
            self.sweep,
            "interval",
            seconds=self._sweep_interval_seconds,
            id="reservation_sweep",
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        self._logger.info("Reservation sweep started", extra={"reason": f"interval={self._sweep_interval_seconds}s"})

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        self._logger.info("Reservation sweep stopped")

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def _evict(self, key: str) -> Hold | None:
        hold = self._holds.pop(key, None)
        if hold is not None:
            self._keys_by_id.pop(hold.id, None)
        return hold
