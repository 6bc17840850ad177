from typing import Optional, Literal
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field


class BookingCreate(BaseModel):
    """Schema for reserving seats on a tour date"""
    tour_date_id: str
    adults: int = Field(..., ge=1)
    children: int = Field(0, ge=0)
    payment_method: Literal["ONSITE", "CARD_STUB"] = "ONSITE"
    notes: Optional[str] = Field(None, max_length=2000)


class BookingUpdate(BaseModel):
    """Schema for changing a booking; omitted fields are left unchanged"""
    adults: Optional[int] = Field(None, ge=1)
    children: Optional[int] = Field(None, ge=0)
    payment_status: Optional[Literal["PENDING", "PAID", "CANCELLED", "REFUNDED"]] = None
    notes: Optional[str] = Field(None, max_length=2000)


class BookingOut(BaseModel):
    """Schema for booking responses"""
    id: str
    user_id: str
    user_name: Optional[str] = None
    tour_date_id: str
    tour_id: Optional[str] = None
    tour_title: Optional[str] = None
    date_start: Optional[datetime] = None
    adults: int
    children: int
    total_price: Decimal
    payment_method: str
    payment_status: str
    qr_code: str
    checked_in: bool
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, booking) -> "BookingOut":
        tour_date = booking.tour_date
        tour = tour_date.tour if tour_date else None
        return cls(
            id=booking.id,
            user_id=booking.user_id,
            user_name=booking.user.name if booking.user else None,
            tour_date_id=booking.tour_date_id,
            tour_id=tour.id if tour else None,
            tour_title=tour.title if tour else None,
            date_start=tour_date.date_start if tour_date else None,
            adults=booking.adults,
            children=booking.children,
            total_price=booking.total_price,
            payment_method=booking.payment_method,
            payment_status=booking.payment_status,
            qr_code=booking.qr_code,
            checked_in=booking.checked_in,
            notes=booking.notes,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class QrVerifyRequest(BaseModel):
    """Schema for scanning a ticket"""
    token: str = Field(..., min_length=1)
