from .capacity_ledger import CapacityLedger, calculate_total_price
from .tour_service import TourService
from .tour_date_service import TourDateService
from .booking_service import BookingService
from .auth_service import AuthService
from .admin_service import AdminService
from .checkin_service import CheckinService
from .notification_service import NotificationService

__all__ = [
    "CapacityLedger",
    "calculate_total_price",
    "TourService",
    "TourDateService",
    "BookingService",
    "AuthService",
    "AdminService",
    "CheckinService",
    "NotificationService",
]
