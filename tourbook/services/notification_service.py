from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tourbook.core import BaseService, NotFoundError
from tourbook.infrastructure.repositories import NotificationRepository
from tourbook.models import Notification

logger = logging.getLogger(__name__)

NEW_BOOKING = "NEW_BOOKING"
BOOKING_UPDATED = "BOOKING_UPDATED"
REFUND_REQUESTED = "REFUND_REQUESTED"
BOOKING_DELETED = "BOOKING_DELETED"


class NotificationService(BaseService):
    """Admin-facing notification records. Delivery channels are not wired yet."""

    def __init__(self, session: AsyncSession, repository: Optional[NotificationRepository] = None):
        super().__init__(session)
        self.repository = repository or NotificationRepository(session)

    async def create_notification(self, type: str, payload: Dict[str, Any]) -> Notification:
        notification = await self.repository.create(obj_in={"type": type, "payload": payload, "seen": False})
        logger.info("[NOTIFICATION] %s: %s", type, payload)
        return notification

    async def list_notifications(self, *, seen: Optional[bool] = None, limit: int = 50) -> List[Notification]:
        return await self.repository.list_recent(seen=seen, limit=limit)

    async def mark_seen(self, notification_id: str) -> Notification:
        notification = await self.repository.update(id=notification_id, obj_in={"seen": True})
        if not notification:
            raise NotFoundError("Notification", notification_id)
        return notification

    async def mark_all_seen(self) -> int:
        return await self.repository.mark_all_seen()

    async def unread_count(self) -> int:
        return await self.repository.count_unseen()
