from .auth_schemas import (
    RegisterRequest, LoginRequest, RefreshTokenRequest, UserOut,
    LoginResponse, RefreshTokenResponse
)
from .tour_schemas import TourCreate, TourUpdate, TourOut, TourDetailOut, TourDateBrief
from .tour_date_schemas import TourDateCreate, TourDateUpdate, TourDateOut
from .booking_schemas import BookingCreate, BookingUpdate, BookingOut, QrVerifyRequest
from .notification_schemas import NotificationOut, UnreadCountOut, MarkAllSeenOut
from .admin_schemas import AdminCreate, AdminStats, UploadOut, MultiUploadOut

__all__ = [
    # Auth
    "RegisterRequest", "LoginRequest", "RefreshTokenRequest", "UserOut",
    "LoginResponse", "RefreshTokenResponse",
    # Tours
    "TourCreate", "TourUpdate", "TourOut", "TourDetailOut", "TourDateBrief",
    # Tour dates
    "TourDateCreate", "TourDateUpdate", "TourDateOut",
    # Bookings
    "BookingCreate", "BookingUpdate", "BookingOut", "QrVerifyRequest",
    # Notifications
    "NotificationOut", "UnreadCountOut", "MarkAllSeenOut",
    # Admin
    "AdminCreate", "AdminStats", "UploadOut", "MultiUploadOut",
]
