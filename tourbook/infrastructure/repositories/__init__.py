from .tour_repository import TourRepository
from .tour_date_repository import TourDateRepository
from .booking_repository import BookingRepository
from .user_repository import UserRepository
from .notification_repository import NotificationRepository

__all__ = [
    "TourRepository",
    "TourDateRepository",
    "BookingRepository",
    "UserRepository",
    "NotificationRepository",
]
