from __future__ import annotations

import logging

from app.application.ports.notifier import NotifierPort
from app.domain.entities.booking import Booking


class LoggingNotifier(NotifierPort):
    def __init__(self, business_name: str = "") -> None:
        self._business_name = business_name
        self._logger = logging.getLogger(__name__)

    def booking_confirmed(self, booking: Booking) -> None:
        self._logger.info(
            "Booking confirmation",
            extra={
                "booking_id": booking.id,
                "date": booking.appointment_date,
                "time": booking.appointment_time,
                "groomer": booking.groomer,
                "reason": f"{self._business_name} reference={booking.reference} to={booking.customer_email}",
            },
        )
