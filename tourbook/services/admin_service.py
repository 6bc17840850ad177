from typing import Dict, Any, List

from tourbook.core import BaseService
from tourbook.infrastructure.repositories import (
    UserRepository,
    TourRepository,
    TourDateRepository,
    BookingRepository,
)
from tourbook.models import User, utcnow
from tourbook.roles import Role
from .auth_service import AuthService


class AdminService(BaseService):
    """Admin accounts and dashboard figures"""

    def __init__(self, session):
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.tour_repo = TourRepository(session)
        self.tour_date_repo = TourDateRepository(session)
        self.booking_repo = BookingRepository(session)

    async def create_admin(self, name: str, email: str, password: str) -> User:
        auth = AuthService(self.session, user_repo=self.user_repo)
        return await auth.create_user(name=name, email=email, password=password, role=Role.admin.value)

    async def list_admins(self, skip: int = 0, limit: int = 100) -> List[User]:
        return await self.user_repo.get_by_role(Role.admin.value, skip=skip, limit=limit)

    async def get_stats(self) -> Dict[str, Any]:
        """Dashboard counters. Revenue only counts PAID bookings."""
        today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)

        return {
            "total_tours": await self.tour_repo.count(),
            "total_bookings": await self.booking_repo.count_live(),
            "today_bookings": await self.booking_repo.count_live(since=today),
            "total_revenue": await self.booking_repo.paid_revenue(),
            "total_available_seats": await self.tour_date_repo.total_available_seats(),
        }
