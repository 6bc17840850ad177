import re
import unicodedata
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict, Any

from tourbook.core import BaseService, NotFoundError, ValidationError, ConflictError
from tourbook.infrastructure.repositories import TourRepository, TourDateRepository
from tourbook.models import Tour, TourDate, utcnow
from tourbook.statuses import TourDateStatus

DURATION_UNITS = ("hours", "days")


def slugify(value: str) -> str:
    """Lowercase ASCII slug with hyphens"""
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9]+", "-", value).strip("-").lower()
    return value


def upcoming_dates(tour: Tour, now: Optional[datetime] = None) -> List[TourDate]:
    """Active dates of *tour* that have not started yet"""
    now = now or utcnow()
    return [
        d for d in tour.dates
        if d.status == TourDateStatus.ACTIVE.value and d.date_start >= now
    ]


class TourService(BaseService):
    """Tour catalog handling business logic"""

    def __init__(self, session, tour_repository: Optional[TourRepository] = None):
        super().__init__(session)
        self.tour_repository = tour_repository or TourRepository(session)
        self.tour_date_repository = TourDateRepository(session)

    async def search_tours(
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
        if min_price is not None and max_price is not None and min_price > max_price:
            raise ValidationError("min_price cannot exceed max_price", field="min_price")
        return await self.tour_repository.search(
            destination=destination,
            language=language,
            min_price=min_price,
            max_price=max_price,
            on_date=on_date,
            skip=skip,
            limit=limit,
        )

    async def get_tour(self, key: str) -> Tour:
        """Get tour by id or slug"""
        tour = await self.tour_repository.get_by_id_or_slug(key)
        if not tour:
            raise NotFoundError("Tour", key)
        return tour

    def _validate(self, data: Dict[str, Any]) -> None:
        unit = data.get("duration_unit")
        if unit is not None and unit not in DURATION_UNITS:
            raise ValidationError(
                f"Invalid duration unit. Must be one of: {', '.join(DURATION_UNITS)}",
                field="duration_unit"
            )
        for field in ("price_adult", "price_child"):
            if data.get(field) is not None and Decimal(str(data[field])) < 0:
                raise ValidationError("Price cannot be negative", field=field)

    async def create_tour(self, data: Dict[str, Any], created_by: Optional[str] = None) -> Tour:
        """Create a tour; the slug is derived from the title when omitted"""
        self._validate(data)
        data = dict(data)
        data["slug"] = slugify(data.get("slug") or data["title"])
        if not data["slug"]:
            raise ValidationError("Slug cannot be empty", field="slug")

        if await self.tour_repository.exists_by_slug(data["slug"]):
            raise ConflictError(f"Tour with slug '{data['slug']}' already exists")

        tour = await self.tour_repository.create(obj_in={**data, "created_by": created_by})
        return await self.get_tour(tour.id)

    async def update_tour(self, tour_id: str, changes: Dict[str, Any]) -> Tour:
        tour = await self.tour_repository.get(tour_id)
        if not tour:
            raise NotFoundError("Tour", tour_id)

        changes = {k: v for k, v in changes.items() if v is not None}
        self._validate(changes)
        if changes.get("slug"):
            changes["slug"] = slugify(changes["slug"])
            if await self.tour_repository.exists_by_slug(changes["slug"], exclude_id=tour_id):
                raise ConflictError(f"Tour with slug '{changes['slug']}' already exists")

        await self.tour_repository.update(id=tour_id, obj_in=changes)
        return await self.get_tour(tour_id)

    async def delete_tour(self, tour_id: str) -> bool:
        """Delete a tour and its dates, refused while any date has live bookings"""
        tour = await self.tour_repository.get_by_id_or_slug(tour_id)
        if not tour:
            raise NotFoundError("Tour", tour_id)

        for tour_date in tour.dates:
            if await self.tour_date_repository.count_live_bookings(tour_date.id) > 0:
                raise ConflictError("Cannot delete tour with existing bookings")

        await self.session.delete(tour)
        await self.session.flush()
        return True
