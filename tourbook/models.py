from datetime import datetime, timezone
import uuid

from sqlalchemy import (
    String, Integer, ForeignKey, Numeric, DateTime, JSON, Boolean, Text,
    Index, CheckConstraint, func,
)
from sqlalchemy.orm import mapped_column, relationship, DeclarativeBase

from .roles import Role
from .statuses import TourDateStatus, PaymentStatus, PaymentMethod


def _gen_id() -> str:
    """Return a random UUID string used as primary key."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns below."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase): ...


# ---------- Accounts ----------
class User(Base):
    __tablename__ = "users"
    id            = mapped_column(String(36), primary_key=True, default=_gen_id)
    name          = mapped_column(String(120), nullable=False)
    email         = mapped_column(String(128), unique=True, nullable=False)
    password_hash = mapped_column(String(128), nullable=False)
    role          = mapped_column(String(16), default=Role.customer.value, nullable=False)
    created_at    = mapped_column(DateTime, default=utcnow, server_default=func.now(), nullable=False)

    bookings = relationship("Booking", back_populates="user")


# ---------- Tours ----------
class Tour(Base):
    __tablename__ = "tours"
    id             = mapped_column(String(36), primary_key=True, default=_gen_id)
    title          = mapped_column(String(200), nullable=False)
    slug           = mapped_column(String(200), unique=True, nullable=False)
    description    = mapped_column(Text, nullable=False)
    price_adult    = mapped_column(Numeric(10, 2), nullable=False)
    price_child    = mapped_column(Numeric(10, 2), nullable=False)
    language       = mapped_column(String(32), nullable=False)
    itinerary      = mapped_column(Text, nullable=False)
    duration_value = mapped_column(Integer, nullable=False)
    duration_unit  = mapped_column(String(16), nullable=False, comment="hours | days")
    cover_image    = mapped_column(String(500), nullable=False)
    # Lists of strings
    images         = mapped_column(JSON, nullable=False, default=list)
    includes       = mapped_column(JSON, nullable=False, default=list)
    excludes       = mapped_column(JSON, nullable=False, default=list)
    terms          = mapped_column(Text, nullable=False, default="")
    created_by     = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at     = mapped_column(DateTime, default=utcnow, server_default=func.now(), nullable=False)

    dates = relationship(
        "TourDate",
        back_populates="tour",
        cascade="save-update, merge, delete",
        order_by="TourDate.date_start",
    )


# ---------- Tour dates (scheduled occurrences of a Tour) ----------
class TourDate(Base):
    __tablename__ = "tour_dates"
    id             = mapped_column(String(36), primary_key=True, default=_gen_id)
    tour_id        = mapped_column(ForeignKey("tours.id"), nullable=False, index=True)
    date_start     = mapped_column(DateTime, nullable=False)
    date_end       = mapped_column(DateTime, nullable=True)
    capacity_min   = mapped_column(Integer, nullable=False, default=1)
    capacity_max   = mapped_column(Integer, nullable=False, comment="Seat ceiling")
    # Seats held by bookings that are not CANCELLED; only the seat ledger writes it
    seats_booked   = mapped_column(Integer, nullable=False, default=0, server_default="0")
    timezone       = mapped_column(String(64), nullable=False, default="Europe/Rome")
    price_override = mapped_column(Numeric(10, 2), nullable=True, comment="Replaces Tour.price_adult when set")
    status         = mapped_column(String(16), nullable=False, default=TourDateStatus.ACTIVE.value)
    created_at     = mapped_column(DateTime, default=utcnow, server_default=func.now(), nullable=False)

    tour     = relationship("Tour", back_populates="dates")
    # Only cancelled bookings can remain when a date is deleted
    bookings = relationship("Booking", back_populates="tour_date", cascade="save-update, merge, delete")

    __table_args__ = (
        CheckConstraint("seats_booked >= 0", name="ck_tour_dates_seats_booked_non_negative"),
        CheckConstraint("seats_booked <= capacity_max", name="ck_tour_dates_seats_within_capacity"),
        Index("ix_tour_dates_tour_start", "tour_id", "date_start"),
    )

    @property
    def available_seats(self) -> int:
        return max(self.capacity_max - self.seats_booked, 0)


# ---------- Bookings ----------
class Booking(Base):
    __tablename__ = "bookings"
    id             = mapped_column(String(36), primary_key=True, default=_gen_id)
    user_id        = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    tour_date_id   = mapped_column(ForeignKey("tour_dates.id"), nullable=False)
    adults         = mapped_column(Integer, nullable=False)
    children       = mapped_column(Integer, nullable=False, default=0)
    total_price    = mapped_column(Numeric(10, 2), nullable=False)
    payment_method = mapped_column(String(16), nullable=False, default=PaymentMethod.ONSITE.value)
    payment_status = mapped_column(String(16), nullable=False, default=PaymentStatus.PENDING.value,
                                   comment="PENDING | PAID | CANCELLED | REFUNDED")
    qr_code        = mapped_column(String(64), unique=True, nullable=False, default=lambda: uuid.uuid4().hex)
    checked_in     = mapped_column(Boolean, nullable=False, default=False)
    notes          = mapped_column(Text, nullable=True)
    created_at     = mapped_column(DateTime, default=utcnow, server_default=func.now(), nullable=False)
    updated_at     = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user      = relationship("User", back_populates="bookings")
    tour_date = relationship("TourDate", back_populates="bookings")

    # Speeds up the per-date seat aggregate
    __table_args__ = (
        CheckConstraint("adults >= 1", name="ck_bookings_adults_positive"),
        CheckConstraint("children >= 0", name="ck_bookings_children_non_negative"),
        Index("ix_bookings_tour_date_status", "tour_date_id", "payment_status"),
    )

    @property
    def seats(self) -> int:
        return self.adults + self.children


# ---------- Admin notifications ----------
class Notification(Base):
    __tablename__ = "notifications"
    id         = mapped_column(String(36), primary_key=True, default=_gen_id)
    type       = mapped_column(String(32), nullable=False, comment="NEW_BOOKING, BOOKING_UPDATED, ...")
    payload    = mapped_column(JSON, nullable=False, default=dict)
    seen       = mapped_column(Boolean, nullable=False, default=False, index=True)
    created_at = mapped_column(DateTime, default=utcnow, server_default=func.now(), nullable=False)
