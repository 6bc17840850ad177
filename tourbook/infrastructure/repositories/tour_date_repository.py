from typing import Optional, List
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tourbook.core import BaseRepository
from tourbook.models import TourDate, Booking
from tourbook.statuses import TourDateStatus, PaymentStatus


class TourDateRepository(BaseRepository[TourDate]):
    """Tour date repository, including the seat counter writes"""

    def __init__(self, session: AsyncSession):
        super().__init__(TourDate, session)

    async def get_with_tour(self, tour_date_id: str) -> Optional[TourDate]:
        """Get tour date with tour loaded"""
        query = (
            select(TourDate)
            .options(selectinload(TourDate.tour))
            .where(TourDate.id == tour_date_id)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_dates(
        self,
        *,
        tour_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[TourDate]:
        query = select(TourDate).options(selectinload(TourDate.tour))
        if tour_id:
            query = query.where(TourDate.tour_id == tour_id)
        query = query.order_by(TourDate.date_start).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def lock_for_update(self, tour_date_id: str) -> Optional[TourDate]:
        """Get tour date with exclusive row lock (no-op on SQLite)"""
        query = (
            select(TourDate)
            .where(TourDate.id == tour_date_id)
            .with_for_update()
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_seats_booked(self, tour_date_id: str) -> int:
        """Seats held by non-cancelled bookings, summed from the booking rows"""
        stmt = (
            select(func.coalesce(func.sum(Booking.adults + Booking.children), 0))
            .where(
                Booking.tour_date_id == tour_date_id,
                Booking.payment_status != PaymentStatus.CANCELLED.value,
            )
        )
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)

    async def read_seat_state(self, tour_date_id: str):
        """Return the current (capacity_max, seats_booked, status) row, bypassing the identity map"""
        stmt = (
            select(TourDate.capacity_max, TourDate.seats_booked, TourDate.status)
            .where(TourDate.id == tour_date_id)
        )
        result = await self.session.execute(stmt)
        return result.one_or_none()

    async def try_take_seats(self, tour_date_id: str, seats: int) -> bool:
        """Add *seats* to the counter if the date is ACTIVE and the ceiling holds.

        A single conditional UPDATE, so the check and the write cannot be
        interleaved by another transaction.
        """
        stmt = (
            update(TourDate)
            .where(
                TourDate.id == tour_date_id,
                TourDate.status == TourDateStatus.ACTIVE.value,
                TourDate.seats_booked + seats <= TourDate.capacity_max,
            )
            .values(seats_booked=TourDate.seats_booked + seats)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def release_seats(self, tour_date_id: str, seats: int) -> None:
        """Return *seats* to the pool"""
        stmt = (
            update(TourDate)
            .where(TourDate.id == tour_date_id, TourDate.seats_booked >= seats)
            .values(seats_booked=TourDate.seats_booked - seats)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def try_set_capacity(self, tour_date_id: str, capacity_max: int) -> bool:
        """Change the ceiling only if it stays at or above the seats already booked"""
        stmt = (
            update(TourDate)
            .where(TourDate.id == tour_date_id, TourDate.seats_booked <= capacity_max)
            .values(capacity_max=capacity_max)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def count_live_bookings(self, tour_date_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Booking)
            .where(
                Booking.tour_date_id == tour_date_id,
                Booking.payment_status != PaymentStatus.CANCELLED.value,
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def total_available_seats(self) -> int:
        stmt = select(func.coalesce(func.sum(TourDate.capacity_max - TourDate.seats_booked), 0))
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)
