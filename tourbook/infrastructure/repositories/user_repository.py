from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourbook.core import BaseRepository
from tourbook.models import User


class UserRepository(BaseRepository[User]):
    """User repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        query = select(User).where(User.email == email.lower())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        """Check if user exists by email"""
        query = select(User.id).where(User.email == email.lower())
        result = await self.session.execute(query)
        return result.scalar() is not None

    async def get_by_role(
        self,
        role: str,
        *,
        skip: int = 0,
        limit: int = 100
    ) -> List[User]:
        """Get users by role"""
        query = (
            select(User)
            .where(User.role == role)
            .order_by(User.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
