"""Seat ledger for tour dates.

Every booking that is not CANCELLED holds ``adults + children`` seats on its
tour date, and the seats held on a date must never exceed
``TourDate.capacity_max``. The ledger keeps that total in
``TourDate.seats_booked`` and only ever moves it with conditional UPDATEs, so
the capacity check and the write happen in one statement and concurrent
reservations on the same date serialize on its row.

Changes to an existing booking first rewrite the booking row on the condition
that its status and party size are still the ones that were read. A stale
copy matches no row and raises ConcurrencyConflictError, so the seats of one
booking are released or resized at most once.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from tourbook.core import (
    BaseService,
    NotFoundError,
    ValidationError,
    BusinessLogicError,
    TourDateInactiveError,
    CapacityExceededError,
    ConcurrencyConflictError,
    InvalidStatusTransitionError,
)
from tourbook.infrastructure.repositories import BookingRepository, TourDateRepository
from tourbook.models import Booking, TourDate, utcnow
from tourbook.statuses import (
    PaymentMethod,
    PaymentStatus,
    TourDateStatus,
    can_transition,
    holds_seats,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# serialization_failure, deadlock_detected, lock_not_available
_CONFLICT_SQLSTATES = {"40001", "40P01", "55P03"}


def calculate_total_price(
    adults: int,
    children: int,
    price_adult,
    price_child,
    price_override=None,
) -> Decimal:
    """Price of a party: the date's override replaces the adult price only."""
    adult_price = price_override if price_override is not None else price_adult
    total = Decimal(adults) * Decimal(str(adult_price)) + Decimal(children) * Decimal(str(price_child))
    return total.quantize(CENT)


def is_conflict(exc: DBAPIError) -> bool:
    """True when the database aborted the statement because of lock contention."""
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _CONFLICT_SQLSTATES:
        return True
    return "database is locked" in str(orig).lower()


@asynccontextmanager
async def translate_conflicts():
    """Re-raise contention aborts as ConcurrencyConflictError; other errors pass through."""
    try:
        yield
    except DBAPIError as exc:
        if is_conflict(exc):
            logger.warning("Seat ledger write aborted by the database: %s", exc.orig)
            raise ConcurrencyConflictError() from exc
        raise


def _validate_party(adults: int, children: int) -> None:
    if adults < 1:
        raise ValidationError("At least one adult is required", field="adults")
    if children < 0:
        raise ValidationError("Children cannot be negative", field="children")


class CapacityLedger(BaseService):
    """Reserve, resize, cancel and discard bookings against tour date capacity."""

    def __init__(self, session: AsyncSession, tour_date_repo: Optional[TourDateRepository] = None):
        super().__init__(session)
        self.tour_date_repo = tour_date_repo or TourDateRepository(session)
        self.booking_repo = BookingRepository(session)

    async def reserve(
        self,
        tour_date_id: str,
        adults: int,
        children: int = 0,
        *,
        user_id: str,
        payment_method: str = PaymentMethod.ONSITE.value,
        notes: Optional[str] = None,
    ) -> Booking:
        """Create a PENDING booking if the party fits on the tour date.

        Raises NotFoundError, TourDateInactiveError, CapacityExceededError or
        ConcurrencyConflictError. Nothing is committed here.
        """
        _validate_party(adults, children)

        tour_date = await self.tour_date_repo.get_with_tour(tour_date_id)
        if not tour_date:
            raise NotFoundError("TourDate", tour_date_id)
        if tour_date.status != TourDateStatus.ACTIVE.value:
            raise TourDateInactiveError(tour_date_id)

        seats = adults + children
        total_price = calculate_total_price(
            adults,
            children,
            tour_date.tour.price_adult,
            tour_date.tour.price_child,
            tour_date.price_override,
        )

        async with translate_conflicts():
            if not await self.tour_date_repo.try_take_seats(tour_date_id, seats):
                await self._reject(tour_date_id, own_seats=0)

            booking = Booking(
                user_id=user_id,
                tour_date=tour_date,
                adults=adults,
                children=children,
                total_price=total_price,
                payment_method=PaymentMethod(payment_method).value,
                payment_status=PaymentStatus.PENDING.value,
                notes=notes,
            )
            self.session.add(booking)
            await self.session.flush()
            await self.session.refresh(tour_date, attribute_names=["seats_booked"])

        logger.info(
            "Reserved %s seats on tour date %s (booking %s, %s/%s booked)",
            seats, tour_date_id, booking.id, tour_date.seats_booked, tour_date.capacity_max,
        )
        return booking

    async def resize(self, booking: Booking, adults: int, children: int) -> Booking:
        """Change the party size of *booking* and reprice it.

        The capacity check counts every other live booking on the date but not
        the booking's own current seats. *booking* must have ``tour_date`` and
        ``tour_date.tour`` loaded. Raises ConcurrencyConflictError when another
        transaction changed the booking after it was read.
        """
        _validate_party(adults, children)
        if not holds_seats(booking.payment_status):
            raise BusinessLogicError("Cancelled bookings cannot be changed", rule="booking_resize")

        tour_date: TourDate = booking.tour_date
        own_seats = booking.seats
        delta = (adults + children) - own_seats
        total_price = calculate_total_price(
            adults,
            children,
            tour_date.tour.price_adult,
            tour_date.tour.price_child,
            tour_date.price_override,
        )

        async with translate_conflicts():
            await self._claim(booking, adults=adults, children=children, total_price=total_price)
            if delta > 0:
                if not await self.tour_date_repo.try_take_seats(tour_date.id, delta):
                    await self._reject(tour_date.id, own_seats=own_seats)
            elif delta < 0:
                await self.tour_date_repo.release_seats(tour_date.id, -delta)
            await self.session.refresh(tour_date, attribute_names=["seats_booked"])

        logger.info("Resized booking %s by %+d seats", booking.id, delta)
        return booking

    async def change_status(self, booking: Booking, status: str) -> Booking:
        """Move *booking* to *status* following the transition table.

        Moving to CANCELLED gives the seats back to the tour date.
        """
        requested = PaymentStatus(status)
        if requested.value == booking.payment_status:
            return booking
        if not can_transition(booking.payment_status, requested):
            raise InvalidStatusTransitionError(booking.payment_status, requested.value)

        releases = not holds_seats(requested)
        seats = booking.seats
        async with translate_conflicts():
            await self._claim(booking, payment_status=requested.value)
            if releases:
                await self.tour_date_repo.release_seats(booking.tour_date_id, seats)
                await self._reload_counter(booking.tour_date_id)

        logger.info("Booking %s is now %s", booking.id, requested.value)
        return booking

    async def discard(self, booking: Booking) -> None:
        """Delete *booking*, returning its seats if it still held any."""
        releases = holds_seats(booking.payment_status)
        seats = booking.seats
        async with translate_conflicts():
            await self._claim(booking, updated_at=utcnow())
            if releases:
                await self.tour_date_repo.release_seats(booking.tour_date_id, seats)
            await self.session.delete(booking)
            await self.session.flush()
            if releases:
                await self._reload_counter(booking.tour_date_id)

    async def _claim(self, booking: Booking, **values) -> None:
        """Write *values* to the booking row if it is still as it was read.

        The conditional UPDATE locks the row, so two transactions acting on the
        same booking cannot both move seats for it.
        """
        if not await self.booking_repo.try_update_unchanged(booking, **values):
            logger.info("Booking %s changed underneath a concurrent write", booking.id)
            raise ConcurrencyConflictError("Booking was changed by another request, please retry")
        await self.session.refresh(booking, attribute_names=sorted({*values, "updated_at"}))

    async def _reload_counter(self, tour_date_id: str) -> None:
        """Bring a loaded tour date in line with a counter UPDATE"""
        tour_date = await self.session.get(TourDate, tour_date_id)
        if tour_date is not None:
            await self.session.refresh(tour_date, attribute_names=["seats_booked"])

    async def _reject(self, tour_date_id: str, *, own_seats: int) -> None:
        """Explain why a conditional seat write matched no row."""
        state = await self.tour_date_repo.read_seat_state(tour_date_id)
        if state is None:
            raise NotFoundError("TourDate", tour_date_id)
        capacity_max, seats_booked, status = state
        if status != TourDateStatus.ACTIVE.value:
            raise TourDateInactiveError(tour_date_id)
        available = capacity_max - (seats_booked - own_seats)
        logger.info("Capacity exceeded on tour date %s: %s seats available", tour_date_id, available)
        raise CapacityExceededError(available)
