"""Post-booking notifications"""
import logging
from abc import ABC, abstractmethod

from domain.entities import Reservation, RoomType

logger = logging.getLogger(__name__)


class NotificationSender(ABC):
    """Fire-and-forget channel invoked after a reservation is admitted"""

    @abstractmethod
    async def send_booking_confirmation(self, reservation: Reservation, room_type: RoomType) -> None:
        pass


class LoggingNotificationSender(NotificationSender):
    """Records the booking notification as a structured log line"""

    async def send_booking_confirmation(self, reservation: Reservation, room_type: RoomType) -> None:
        logger.info(
            "booking notification sent",
            extra={
                "extra_fields": {
                    "reference": reservation.reference,
                    "room_type_id": room_type.room_type_id,
                    "room_type_name": room_type.name,
                    "check_in": reservation.check_in.isoformat(),
                    "check_out": reservation.check_out.isoformat(),
                    "number_of_units": reservation.number_of_units,
                    "total_price": str(reservation.pricing.total_price),
                },
            },
        )
