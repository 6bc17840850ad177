from fastapi import APIRouter, Depends

from tourbook.roles import Role
from tourbook.security import role_required
from tourbook.api.v1.endpoints import (
    auth, tours, tour_dates, bookings, qrcode, notifications, admin, upload
)


# Create main API router
api_v1_router = APIRouter()

# Auth endpoints (public access)
api_v1_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["auth"]
)

# Tour catalog (public reads, admin writes)
api_v1_router.include_router(
    tours.router,
    prefix="/tours",
    tags=["tours"]
)

# Tour dates (public reads, admin writes)
api_v1_router.include_router(
    tour_dates.router,
    prefix="/tour-dates",
    tags=["tour-dates"]
)

# Bookings (any authenticated user, ownership checked in the service)
api_v1_router.include_router(
    bookings.router,
    prefix="/bookings",
    tags=["bookings"]
)

# QR tickets
api_v1_router.include_router(
    qrcode.router,
    prefix="/qrcode",
    tags=["qrcode"]
)

# Notifications (admin access)
api_v1_router.include_router(
    notifications.router,
    prefix="/notifications",
    tags=["notifications"],
    dependencies=[Depends(role_required(Role.admin))]
)

# Admin accounts and dashboard (admin access)
api_v1_router.include_router(
    admin.router,
    prefix="/admins",
    tags=["admin"],
    dependencies=[Depends(role_required(Role.admin))]
)

# File uploads (admin access)
api_v1_router.include_router(
    upload.router,
    prefix="/upload",
    tags=["upload"],
    dependencies=[Depends(role_required(Role.admin))]
)
