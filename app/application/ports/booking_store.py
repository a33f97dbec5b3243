from __future__ import annotations

from abc import ABC, abstractmethod

from app.domain.entities.booking import Booking, NewBooking


class BookingStorePort(ABC):
    @abstractmethod
    def list_bookings(
        self,
        date: str | None = None,
        status: str | None = None,
        force_refresh: bool = False,
    ) -> list[Booking]:
        """
        List bookings, optionally filtered by calendar date and status.
        force_refresh asks the store to bypass any read cache it keeps.
        """
        raise NotImplementedError

    @abstractmethod
    def get_booking(self, booking_id: int) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def insert_booking(self, booking: NewBooking) -> Booking:
        """Persist a booking. The store assigns id and created_at."""
        raise NotImplementedError

    @abstractmethod
    def update_booking_status(self, booking_id: int, status: str) -> Booking:
        """Overwrite the status of a booking. Raises BookingNotFound for unknown ids."""
        raise NotImplementedError
