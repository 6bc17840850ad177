from typing import List, Optional

from fastapi import APIRouter, Query, Response, status

from tourbook.api.v1.schemas.booking_schemas import BookingCreate, BookingUpdate, BookingOut
from tourbook.deps import SessionDep
from tourbook.security import CurrentUser
from tourbook.services.booking_service import BookingService
from .utils import get_user_id, is_admin


router = APIRouter()


@router.get("/", response_model=List[BookingOut])
async def list_bookings(
    sess: SessionDep,
    user: CurrentUser,
    user_id: Optional[str] = Query(None, description="Admin only: bookings of one user"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """Admins see all bookings, customers their own"""
    service = BookingService(sess)
    bookings = await service.list_bookings(
        get_user_id(user),
        is_admin(user),
        filter_user_id=user_id,
        skip=skip,
        limit=limit,
    )
    return [BookingOut.from_model(b) for b in bookings]


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(booking_id: str, sess: SessionDep, user: CurrentUser):
    service = BookingService(sess)
    booking = await service.get_booking(booking_id, get_user_id(user), is_admin(user))
    return BookingOut.from_model(booking)


@router.post("/", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(payload: BookingCreate, sess: SessionDep, user: CurrentUser):
    """Reserve seats; 409 with ``available`` when the party does not fit"""
    service = BookingService(sess)
    booking = await service.create_booking(
        user_id=get_user_id(user),
        tour_date_id=payload.tour_date_id,
        adults=payload.adults,
        children=payload.children,
        payment_method=payload.payment_method,
        notes=payload.notes,
    )
    return BookingOut.from_model(booking)


@router.patch("/{booking_id}", response_model=BookingOut)
async def update_booking(booking_id: str, payload: BookingUpdate, sess: SessionDep, user: CurrentUser):
    service = BookingService(sess)
    booking = await service.update_booking(
        booking_id,
        get_user_id(user),
        is_admin(user),
        **payload.model_dump(exclude_unset=True),
    )
    return BookingOut.from_model(booking)


@router.delete("/{booking_id}", response_model=Optional[BookingOut])
async def delete_booking(
    booking_id: str,
    sess: SessionDep,
    user: CurrentUser,
    request_refund: bool = Query(False, description="Cancel and ask for a refund instead of deleting"),
):
    service = BookingService(sess)
    booking = await service.delete_booking(
        booking_id,
        get_user_id(user),
        is_admin(user),
        request_refund=request_refund,
    )
    if booking is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return BookingOut.from_model(booking)
