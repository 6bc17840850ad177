from typing import Optional, List
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from tourbook.core import BaseRepository
from tourbook.models import Notification


class NotificationRepository(BaseRepository[Notification]):
    """Notification repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Notification, session)

    async def list_recent(self, *, seen: Optional[bool] = None, limit: int = 50) -> List[Notification]:
        query = select(Notification)
        if seen is not None:
            query = query.where(Notification.seen == seen)
        query = query.order_by(Notification.created_at.desc()).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def mark_all_seen(self) -> int:
        stmt = (
            update(Notification)
            .where(Notification.seen == False)  # noqa: E712
            .values(seen=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def count_unseen(self) -> int:
        query = select(func.count()).select_from(Notification).where(Notification.seen == False)  # noqa: E712
        result = await self.session.execute(query)
        return result.scalar() or 0
