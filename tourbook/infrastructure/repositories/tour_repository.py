from typing import Optional, List
from datetime import datetime, timedelta
from decimal import Decimal
from sqlalchemy import select, or_, exists
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from tourbook.core import BaseRepository
from tourbook.models import Tour, TourDate
from tourbook.statuses import TourDateStatus


class TourRepository(BaseRepository[Tour]):
    """Tour repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Tour, session)

    async def get_by_id_or_slug(self, key: str) -> Optional[Tour]:
        """Get tour by primary key or slug, with its dates loaded"""
        query = (
            select(Tour)
            .options(selectinload(Tour.dates))
            .where(or_(Tour.id == key, Tour.slug == key))
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def exists_by_slug(self, slug: str, *, exclude_id: Optional[str] = None) -> bool:
        query = select(Tour.id).where(Tour.slug == slug)
        if exclude_id:
            query = query.where(Tour.id != exclude_id)
        result = await self.session.execute(query)
        return result.scalar() is not None

    async def search(
        self,
        *,
        destination: Optional[str] = None,
        language: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        on_date: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Tour]:
        """Search tours with filters"""
        query = select(Tour).options(selectinload(Tour.dates))

        if destination:
            query = query.where(Tour.title.ilike(f"%{destination}%"))
        if language:
            query = query.where(Tour.language == language)
        if min_price is not None:
            query = query.where(Tour.price_adult >= min_price)
        if max_price is not None:
            query = query.where(Tour.price_adult <= max_price)
        if on_date is not None:
            day_start = on_date.replace(hour=0, minute=0, second=0, microsecond=0)
            query = query.where(
                exists().where(
                    TourDate.tour_id == Tour.id,
                    TourDate.status == TourDateStatus.ACTIVE.value,
                    TourDate.date_start >= day_start,
                    TourDate.date_start < day_start + timedelta(days=1),
                )
            )

        query = query.order_by(Tour.created_at.desc()).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
