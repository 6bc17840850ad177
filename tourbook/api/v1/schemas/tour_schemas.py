from typing import Optional, List, Literal
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field


class TourDateBrief(BaseModel):
    """Upcoming date shown on a tour page"""
    id: str
    date_start: datetime
    date_end: Optional[datetime] = None
    capacity_max: int
    seats_booked: int
    available_seats: int
    price_override: Optional[Decimal] = None
    timezone: str
    status: str

    model_config = {
        "from_attributes": True,
    }


class TourBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str
    price_adult: Decimal = Field(..., ge=0)
    price_child: Decimal = Field(..., ge=0)
    language: str = Field(..., min_length=2, max_length=32)
    itinerary: str
    duration_value: int = Field(..., ge=1)
    duration_unit: Literal["hours", "days"]
    cover_image: str
    images: List[str] = []
    includes: List[str] = []
    excludes: List[str] = []
    terms: str = ""


class TourCreate(TourBase):
    """Schema for creating a tour"""
    slug: Optional[str] = Field(None, max_length=200)


class TourUpdate(BaseModel):
    """Schema for updating a tour; omitted fields are left unchanged"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    price_adult: Optional[Decimal] = Field(None, ge=0)
    price_child: Optional[Decimal] = Field(None, ge=0)
    language: Optional[str] = Field(None, min_length=2, max_length=32)
    itinerary: Optional[str] = None
    duration_value: Optional[int] = Field(None, ge=1)
    duration_unit: Optional[Literal["hours", "days"]] = None
    cover_image: Optional[str] = None
    images: Optional[List[str]] = None
    includes: Optional[List[str]] = None
    excludes: Optional[List[str]] = None
    terms: Optional[str] = None


class TourOut(TourBase):
    """Schema for tour responses"""
    id: str
    slug: str
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }


class TourDetailOut(TourOut):
    """Tour with its upcoming bookable dates"""
    dates: List[TourDateBrief] = []
