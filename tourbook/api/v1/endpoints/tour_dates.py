from typing import List, Optional

from fastapi import APIRouter, Query, status

from tourbook.api.v1.schemas.tour_date_schemas import TourDateCreate, TourDateUpdate, TourDateOut
from tourbook.deps import SessionDep
from tourbook.security import AdminUser
from tourbook.services.tour_date_service import TourDateService


router = APIRouter()


@router.get("/", response_model=List[TourDateOut])
async def list_tour_dates(
    sess: SessionDep,
    tour_id: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """Tour dates with booked and available seats"""
    service = TourDateService(sess)
    dates = await service.list_tour_dates(tour_id=tour_id, skip=skip, limit=limit)
    return [TourDateOut.from_model(d) for d in dates]


@router.get("/{tour_date_id}", response_model=TourDateOut)
async def get_tour_date(tour_date_id: str, sess: SessionDep):
    service = TourDateService(sess)
    return TourDateOut.from_model(await service.get_tour_date(tour_date_id))


@router.post("/", response_model=TourDateOut, status_code=status.HTTP_201_CREATED)
async def create_tour_date(payload: TourDateCreate, sess: SessionDep, user: AdminUser):
    service = TourDateService(sess)
    tour_date = await service.create_tour_date(**payload.model_dump())
    await sess.commit()
    return TourDateOut.from_model(tour_date)


@router.patch("/{tour_date_id}", response_model=TourDateOut)
async def update_tour_date(tour_date_id: str, payload: TourDateUpdate, sess: SessionDep, user: AdminUser):
    service = TourDateService(sess)
    tour_date = await service.update_tour_date(tour_date_id, payload.model_dump(exclude_unset=True))
    await sess.commit()
    return TourDateOut.from_model(tour_date)


@router.delete("/{tour_date_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tour_date(tour_date_id: str, sess: SessionDep, user: AdminUser):
    service = TourDateService(sess)
    await service.delete_tour_date(tour_date_id)
    await sess.commit()
