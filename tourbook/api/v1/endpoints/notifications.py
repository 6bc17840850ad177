from typing import List, Optional

from fastapi import APIRouter, Query

from tourbook.api.v1.schemas.notification_schemas import NotificationOut, UnreadCountOut, MarkAllSeenOut
from tourbook.deps import SessionDep
from tourbook.services.notification_service import NotificationService


router = APIRouter()


@router.get("/", response_model=List[NotificationOut])
async def list_notifications(
    sess: SessionDep,
    seen: Optional[bool] = None,
    limit: int = Query(50, ge=1, le=200),
):
    service = NotificationService(sess)
    notifications = await service.list_notifications(seen=seen, limit=limit)
    return [NotificationOut.model_validate(n) for n in notifications]


@router.get("/unread-count", response_model=UnreadCountOut)
async def unread_count(sess: SessionDep):
    service = NotificationService(sess)
    return UnreadCountOut(unread=await service.unread_count())


@router.post("/mark-all-seen", response_model=MarkAllSeenOut)
async def mark_all_seen(sess: SessionDep):
    service = NotificationService(sess)
    updated = await service.mark_all_seen()
    await sess.commit()
    return MarkAllSeenOut(updated=updated)


@router.patch("/{notification_id}/seen", response_model=NotificationOut)
async def mark_seen(notification_id: str, sess: SessionDep):
    service = NotificationService(sess)
    notification = await service.mark_seen(notification_id)
    await sess.commit()
    return NotificationOut.model_validate(notification)
