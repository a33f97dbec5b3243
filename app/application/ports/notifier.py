from abc import ABC, abstractmethod

from app.domain.entities.booking import Booking


class NotifierPort(ABC):
    @abstractmethod
    def booking_confirmed(self, booking: Booking) -> None:
        raise NotImplementedError
