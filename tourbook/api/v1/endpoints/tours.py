from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, Query, status

from tourbook.api.v1.schemas.tour_schemas import (
    TourCreate, TourUpdate, TourOut, TourDetailOut, TourDateBrief
)
from tourbook.deps import SessionDep
from tourbook.security import AdminUser
from tourbook.services.tour_service import TourService, upcoming_dates
from .utils import get_user_id


router = APIRouter()


def _detail(tour) -> TourDetailOut:
    out = TourDetailOut.model_validate(tour)
    return out.model_copy(update={
        "dates": [TourDateBrief.model_validate(d) for d in upcoming_dates(tour)]
    })


@router.get("/", response_model=List[TourOut])
async def list_tours(
    sess: SessionDep,
    destination: Optional[str] = Query(None, description="Substring of the tour title"),
    language: Optional[str] = None,
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    on_date: Optional[date] = Query(None, alias="date", description="Day with an active tour date"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
):
    """Public tour catalog"""
    service = TourService(sess)
    tours = await service.search_tours(
        destination=destination,
        language=language,
        min_price=min_price,
        max_price=max_price,
        on_date=datetime.combine(on_date, datetime.min.time()) if on_date else None,
        skip=skip,
        limit=limit,
    )
    return [TourOut.model_validate(t) for t in tours]


@router.get("/{key}", response_model=TourDetailOut)
async def get_tour(key: str, sess: SessionDep):
    """Tour by id or slug, with upcoming active dates"""
    service = TourService(sess)
    return _detail(await service.get_tour(key))


@router.post("/", response_model=TourDetailOut, status_code=status.HTTP_201_CREATED)
async def create_tour(payload: TourCreate, sess: SessionDep, user: AdminUser):
    service = TourService(sess)
    tour = await service.create_tour(payload.model_dump(), created_by=get_user_id(user))
    await sess.commit()
    return _detail(tour)


@router.patch("/{tour_id}", response_model=TourDetailOut)
async def update_tour(tour_id: str, payload: TourUpdate, sess: SessionDep, user: AdminUser):
    service = TourService(sess)
    tour = await service.update_tour(tour_id, payload.model_dump(exclude_unset=True))
    await sess.commit()
    return _detail(tour)


@router.delete("/{tour_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tour(tour_id: str, sess: SessionDep, user: AdminUser):
    service = TourService(sess)
    await service.delete_tour(tour_id)
    await sess.commit()
