from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal

from tourbook.core import BaseService, NotFoundError, ValidationError, ConflictError, get_settings
from tourbook.infrastructure.repositories import TourDateRepository, TourRepository
from tourbook.models import TourDate
from tourbook.statuses import TourDateStatus

NULLABLE_FIELDS = ("date_end", "price_override")


class TourDateService(BaseService):
    """Tour date scheduling and capacity management"""

    def __init__(self, session, tour_date_repo: Optional[TourDateRepository] = None,
                 tour_repo: Optional[TourRepository] = None):
        super().__init__(session)
        self.tour_date_repo = tour_date_repo or TourDateRepository(session)
        self.tour_repo = tour_repo or TourRepository(session)

    async def list_tour_dates(
        self,
        tour_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[TourDate]:
        return await self.tour_date_repo.list_dates(tour_id=tour_id, skip=skip, limit=limit)

    async def get_tour_date(self, tour_date_id: str) -> TourDate:
        tour_date = await self.tour_date_repo.get_with_tour(tour_date_id)
        if not tour_date:
            raise NotFoundError("TourDate", tour_date_id)
        return tour_date

    async def create_tour_date(
        self,
        tour_id: str,
        date_start: datetime,
        capacity_max: int,
        capacity_min: int = 1,
        date_end: Optional[datetime] = None,
        timezone: Optional[str] = None,
        price_override: Optional[Decimal] = None,
    ) -> TourDate:
        """Create an ACTIVE tour date with an empty seat counter"""
        if capacity_min > capacity_max:
            raise ValidationError("Minimum capacity cannot exceed maximum capacity", field="capacity_min")
        if date_end is not None and date_end < date_start:
            raise ValidationError("End date must be after start date", field="date_end")

        tour = await self.tour_repo.get(tour_id)
        if not tour:
            raise NotFoundError("Tour", tour_id)

        tour_date = await self.tour_date_repo.create(obj_in={
            "tour_id": tour_id,
            "date_start": date_start,
            "date_end": date_end,
            "capacity_min": capacity_min,
            "capacity_max": capacity_max,
            "seats_booked": 0,
            "timezone": timezone or get_settings().DEFAULT_TIMEZONE,
            "price_override": price_override,
            "status": TourDateStatus.ACTIVE.value,
        })
        return await self.get_tour_date(tour_date.id)

    async def update_tour_date(self, tour_date_id: str, changes: Dict[str, Any]) -> TourDate:
        """Update schedule, status, price override or capacity.

        The ceiling cannot drop below the seats already booked.
        """
        changes = {k: v for k, v in changes.items() if v is not None or k in NULLABLE_FIELDS}
        tour_date = await self.tour_date_repo.lock_for_update(tour_date_id)
        if not tour_date:
            raise NotFoundError("TourDate", tour_date_id)

        capacity_max = changes.pop("capacity_max", None)
        capacity_min = changes.get("capacity_min", tour_date.capacity_min)
        if capacity_min > (capacity_max if capacity_max is not None else tour_date.capacity_max):
            raise ValidationError("Minimum capacity cannot exceed maximum capacity", field="capacity_min")

        if capacity_max is not None and capacity_max != tour_date.capacity_max:
            if not await self.tour_date_repo.try_set_capacity(tour_date_id, capacity_max):
                seats_booked = await self.tour_date_repo.get_seats_booked(tour_date_id)
                raise ConflictError(
                    f"Cannot set capacity to {capacity_max}, {seats_booked} seats already booked",
                    details={"booked_seats": seats_booked}
                )

        if "status" in changes and changes["status"] is not None:
            changes["status"] = TourDateStatus(changes["status"]).value

        if changes:
            await self.tour_date_repo.update(id=tour_date_id, obj_in=changes)

        await self.session.refresh(tour_date, attribute_names=["capacity_max", "seats_booked"])
        return await self.get_tour_date(tour_date_id)

    async def delete_tour_date(self, tour_date_id: str) -> bool:
        """Delete a tour date that has no live bookings"""
        tour_date = await self.tour_date_repo.get(tour_date_id)
        if not tour_date:
            raise NotFoundError("TourDate", tour_date_id)

        if await self.tour_date_repo.count_live_bookings(tour_date_id) > 0:
            raise ConflictError("Cannot delete tour date with existing bookings")

        return await self.tour_date_repo.delete(id=tour_date_id)
