from decimal import Decimal
from typing import List

from pydantic import BaseModel, EmailStr, Field


class AdminCreate(BaseModel):
    """Schema for creating another administrator"""
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=6)


class AdminStats(BaseModel):
    """Dashboard counters"""
    total_tours: int
    total_bookings: int
    today_bookings: int
    total_revenue: Decimal
    total_available_seats: int


class UploadOut(BaseModel):
    key: str
    url: str


class MultiUploadOut(BaseModel):
    files: List[UploadOut]
