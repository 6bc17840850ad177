from typing import Optional, Literal
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, model_validator


class TourDateCreate(BaseModel):
    """Schema for scheduling a tour date"""
    tour_id: str
    date_start: datetime
    date_end: Optional[datetime] = None
    capacity_min: int = Field(1, ge=1)
    capacity_max: int = Field(..., ge=1)
    timezone: Optional[str] = None
    price_override: Optional[Decimal] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_capacity(self):
        if self.capacity_min > self.capacity_max:
            raise ValueError("capacity_min cannot exceed capacity_max")
        return self


class TourDateUpdate(BaseModel):
    """Schema for updating a tour date"""
    date_start: Optional[datetime] = None
    date_end: Optional[datetime] = None
    capacity_min: Optional[int] = Field(None, ge=1)
    capacity_max: Optional[int] = Field(None, ge=1)
    timezone: Optional[str] = None
    price_override: Optional[Decimal] = Field(None, ge=0)
    status: Optional[Literal["ACTIVE", "INACTIVE"]] = None


class TourDateOut(BaseModel):
    """Schema for tour date responses"""
    id: str
    tour_id: str
    tour_title: Optional[str] = None
    date_start: datetime
    date_end: Optional[datetime] = None
    capacity_min: int
    capacity_max: int
    booked_seats: int
    available_seats: int
    timezone: str
    price_override: Optional[Decimal] = None
    status: str

    @classmethod
    def from_model(cls, tour_date) -> "TourDateOut":
        return cls(
            id=tour_date.id,
            tour_id=tour_date.tour_id,
            tour_title=tour_date.tour.title if tour_date.tour else None,
            date_start=tour_date.date_start,
            date_end=tour_date.date_end,
            capacity_min=tour_date.capacity_min,
            capacity_max=tour_date.capacity_max,
            booked_seats=tour_date.seats_booked,
            available_seats=tour_date.available_seats,
            timezone=tour_date.timezone,
            price_override=tour_date.price_override,
            status=tour_date.status,
        )
