from fastapi import APIRouter

from tourbook.api.v1.schemas.booking_schemas import BookingOut, QrVerifyRequest
from tourbook.deps import SessionDep
from tourbook.security import AdminUser
from tourbook.services.checkin_service import CheckinService


router = APIRouter()


@router.post("/verify", response_model=BookingOut)
async def verify_ticket(payload: QrVerifyRequest, sess: SessionDep, user: AdminUser):
    """Check a ticket in at the meeting point"""
    service = CheckinService(sess)
    booking = await service.verify(payload.token)
    await sess.commit()
    return BookingOut.from_model(booking)


@router.get("/{token}", response_model=BookingOut)
async def get_ticket(token: str, sess: SessionDep):
    service = CheckinService(sess)
    return BookingOut.from_model(await service.get_by_token(token))
