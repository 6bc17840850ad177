import logging

from tourbook.core import BaseService, NotFoundError, BusinessLogicError
from tourbook.infrastructure.repositories import BookingRepository
from tourbook.models import Booking
from tourbook.statuses import holds_seats

logger = logging.getLogger(__name__)


class CheckinService(BaseService):
    """QR ticket lookup and check-in"""

    def __init__(self, session, booking_repo: BookingRepository | None = None):
        super().__init__(session)
        self.booking_repo = booking_repo or BookingRepository(session)

    async def get_by_token(self, token: str) -> Booking:
        booking = await self.booking_repo.get_by_qr_code(token)
        if not booking:
            raise NotFoundError("Booking", token)
        return booking

    async def verify(self, token: str) -> Booking:
        """Mark the ticket as checked in. Scanning twice is harmless."""
        booking = await self.get_by_token(token)
        if not holds_seats(booking.payment_status):
            raise BusinessLogicError("Booking is cancelled", rule="checkin_cancelled")

        if not booking.checked_in:
            booking.checked_in = True
            await self.session.flush()
            logger.info("Booking %s checked in", booking.id)
        return booking
