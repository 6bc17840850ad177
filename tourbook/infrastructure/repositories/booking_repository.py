from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tourbook.core import BaseRepository
from tourbook.models import Booking, TourDate
from tourbook.statuses import PaymentStatus


class BookingRepository(BaseRepository[Booking]):
    """Booking repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Booking, session)

    def _with_details(self, query):
        return query.options(
            selectinload(Booking.user),
            selectinload(Booking.tour_date).selectinload(TourDate.tour),
        )

    async def get_with_details(self, booking_id: str) -> Optional[Booking]:
        """Get booking with user, tour date and tour loaded"""
        query = self._with_details(select(Booking)).where(Booking.id == booking_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_qr_code(self, token: str) -> Optional[Booking]:
        query = self._with_details(select(Booking)).where(Booking.qr_code == token)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_bookings(
        self,
        *,
        user_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Booking]:
        query = self._with_details(select(Booking))
        if user_id:
            query = query.where(Booking.user_id == user_id)
        query = query.order_by(Booking.created_at.desc()).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_live(self, *, since: Optional[datetime] = None) -> int:
        """Count bookings that are not cancelled"""
        query = (
            select(func.count())
            .select_from(Booking)
            .where(Booking.payment_status != PaymentStatus.CANCELLED.value)
        )
        if since is not None:
            query = query.where(Booking.created_at >= since)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def paid_revenue(self) -> Decimal:
        query = (
            select(func.coalesce(func.sum(Booking.total_price), 0))
            .where(Booking.payment_status == PaymentStatus.PAID.value)
        )
        result = await self.session.execute(query)
        return Decimal(result.scalar() or 0)

    def _unchanged(self, booking: Booking):
        """Match the booking row only while it still holds what *booking* was read with"""
        return (
            Booking.id == booking.id,
            Booking.payment_status == booking.payment_status,
            Booking.adults == booking.adults,
            Booking.children == booking.children,
        )

    async def try_update_unchanged(self, booking: Booking, **values) -> bool:
        """Write *values* unless another transaction changed the status or party first"""
        stmt = (
            update(Booking)
            .where(*self._unchanged(booking))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
