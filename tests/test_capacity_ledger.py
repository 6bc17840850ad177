import asyncio
from decimal import Decimal

import pytest

from tourbook.core import (
    BusinessLogicError,
    CapacityExceededError,
    ConcurrencyConflictError,
    InvalidStatusTransitionError,
    NotFoundError,
    TourDateInactiveError,
    ValidationError,
)
from tourbook.infrastructure.repositories import BookingRepository, TourDateRepository
from tourbook.services.booking_service import BookingService
from tourbook.services.capacity_ledger import CapacityLedger
from tourbook.statuses import PaymentStatus


async def seats_on(session, tour_date_id):
    """(counter, sum over live bookings) for a date"""
    repo = TourDateRepository(session)
    _, counter, _ = await repo.read_seat_state(tour_date_id)
    return counter, await repo.get_seats_booked(tour_date_id)


async def load(session, booking_id):
    return await BookingRepository(session).get_with_details(booking_id)


async def test_request_larger_than_remaining_reports_available(session, tour_date, fill, customer):
    tour_date_id, customer_id = tour_date.id, customer.id
    await fill(tour_date_id, 8)
    ledger = CapacityLedger(session)

    with pytest.raises(CapacityExceededError) as exc_info:
        await ledger.reserve(tour_date_id, 3, 0, user_id=customer_id)
    await session.rollback()

    assert exc_info.value.available == 2
    assert exc_info.value.details == {"available": 2}
    assert await seats_on(session, tour_date_id) == (8, 8)


async def test_request_that_fits_fills_the_date(session, tour_date, fill, customer):
    await fill(tour_date.id, 8)

    booking = await CapacityLedger(session).reserve(tour_date.id, 2, 0, user_id=customer.id)
    await session.commit()

    assert booking.payment_status == PaymentStatus.PENDING.value
    assert booking.seats == 2
    assert await seats_on(session, tour_date.id) == (10, 10)


async def test_sequence_of_reservations_never_exceeds_capacity(session, tour_date, customer):
    tour_date_id, capacity, customer_id = tour_date.id, tour_date.capacity_max, customer.id
    ledger = CapacityLedger(session)
    outcomes = []

    for party in [3, 4, 2, 5, 1, 1, 2]:
        try:
            await ledger.reserve(tour_date_id, party, 0, user_id=customer_id)
            await session.commit()
            outcomes.append(party)
        except CapacityExceededError as exc:
            await session.rollback()
            outcomes.append(-exc.available)

        counter, live = await seats_on(session, tour_date_id)
        assert counter == live
        assert live <= capacity

    assert outcomes == [3, 4, 2, -1, 1, 0, 0]


async def test_concurrent_reservations_only_one_fits(session_factory, tour_date, fill, customer):
    await fill(tour_date.id, 7)

    async def attempt():
        async with session_factory() as s:
            return await BookingService(s).create_booking(customer.id, tour_date.id, 2, 0)

    results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], CapacityExceededError)
    assert failures[0].available == 1

    async with session_factory() as s:
        assert await seats_on(s, tour_date.id) == (9, 9)


async def test_cancelling_releases_seats(session, tour_date, fill, customer):
    tour_date_id, customer_id = tour_date.id, customer.id
    await fill(tour_date_id, 6)
    booking_id = (await fill(tour_date_id, 4)).id
    ledger = CapacityLedger(session)

    with pytest.raises(CapacityExceededError):
        await ledger.reserve(tour_date_id, 1, 0, user_id=customer_id)
    await session.rollback()

    await ledger.change_status(await load(session, booking_id), PaymentStatus.CANCELLED.value)
    await session.commit()
    assert await seats_on(session, tour_date_id) == (6, 6)

    await ledger.reserve(tour_date_id, 4, 0, user_id=customer_id)
    await session.commit()
    assert await seats_on(session, tour_date_id) == (10, 10)


async def test_resize_excludes_own_seats(session, tour_date, fill):
    await fill(tour_date.id, 6)
    booking = await fill(tour_date.id, 2)
    ledger = CapacityLedger(session)

    await ledger.resize(booking, 1, 3)
    await session.commit()

    assert (booking.adults, booking.children) == (1, 3)
    assert booking.total_price == Decimal("110.00")
    assert await seats_on(session, tour_date.id) == (10, 10)


async def test_resize_over_capacity_reports_available_without_own_seats(session, tour_date, fill):
    tour_date_id = tour_date.id
    await fill(tour_date_id, 6)
    booking = await fill(tour_date_id, 2)

    with pytest.raises(CapacityExceededError) as exc_info:
        await CapacityLedger(session).resize(booking, 3, 3)
    await session.rollback()

    assert exc_info.value.available == 4
    assert await seats_on(session, tour_date_id) == (8, 8)


async def test_shrinking_a_booking_gives_seats_back(session, tour_date, fill):
    booking = await fill(tour_date.id, 5)

    await CapacityLedger(session).resize(booking, 2, 0)
    await session.commit()

    assert await seats_on(session, tour_date.id) == (2, 2)


async def test_cancelled_booking_cannot_be_resized(session, tour_date, fill):
    booking = await fill(tour_date.id, 2)
    ledger = CapacityLedger(session)
    await ledger.change_status(booking, PaymentStatus.CANCELLED.value)
    await session.commit()

    with pytest.raises(BusinessLogicError) as exc_info:
        await ledger.resize(booking, 3, 0)
    assert exc_info.value.details == {"rule": "booking_resize"}


async def test_inactive_date_rejects_reservations(session, make_tour_date, customer):
    tour_date = await make_tour_date(capacity_max=10, status="INACTIVE")

    with pytest.raises(TourDateInactiveError):
        await CapacityLedger(session).reserve(tour_date.id, 1, 0, user_id=customer.id)


async def test_missing_date_is_not_found(session, customer):
    with pytest.raises(NotFoundError):
        await CapacityLedger(session).reserve("no-such-date", 1, 0, user_id=customer.id)


@pytest.mark.parametrize("adults,children", [(0, 2), (1, -1)])
async def test_party_must_have_an_adult(session, tour_date, customer, adults, children):
    with pytest.raises(ValidationError):
        await CapacityLedger(session).reserve(tour_date.id, adults, children, user_id=customer.id)


async def test_price_override_replaces_adult_price(session, make_tour_date, customer):
    tour_date = await make_tour_date(capacity_max=10, price_override=Decimal("40.00"))

    booking = await CapacityLedger(session).reserve(tour_date.id, 2, 1, user_id=customer.id)

    assert booking.total_price == Decimal("100.00")


async def test_terminal_status_cannot_move(session, tour_date, fill):
    booking = await fill(tour_date.id, 2)
    ledger = CapacityLedger(session)
    await ledger.change_status(booking, PaymentStatus.CANCELLED.value)
    await session.commit()

    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        await ledger.change_status(booking, PaymentStatus.PAID.value)
    assert exc_info.value.status_code == 422


async def test_refunded_booking_keeps_its_seats(session, tour_date, fill):
    booking = await fill(tour_date.id, 3)
    ledger = CapacityLedger(session)

    await ledger.change_status(booking, PaymentStatus.PAID.value)
    await ledger.change_status(booking, PaymentStatus.REFUNDED.value)
    await session.commit()

    assert await seats_on(session, tour_date.id) == (3, 3)


async def test_stale_second_cancel_does_not_release_seats_again(session_factory, tour_date, fill, customer):
    tour_date_id, customer_id = tour_date.id, customer.id
    await fill(tour_date_id, 6)
    booking_id = (await fill(tour_date_id, 4)).id

    async with session_factory() as first, session_factory() as second:
        mine = await load(first, booking_id)
        stale = await load(second, booking_id)

        await CapacityLedger(first).change_status(mine, PaymentStatus.CANCELLED.value)
        await first.commit()

        with pytest.raises(ConcurrencyConflictError):
            await CapacityLedger(second).change_status(stale, PaymentStatus.CANCELLED.value)
        await second.rollback()

    async with session_factory() as s:
        assert await seats_on(s, tour_date_id) == (6, 6)

        ledger = CapacityLedger(s)
        await ledger.reserve(tour_date_id, 4, 0, user_id=customer_id)
        await s.commit()
        with pytest.raises(CapacityExceededError) as exc_info:
            await ledger.reserve(tour_date_id, 1, 0, user_id=customer_id)
        assert exc_info.value.available == 0


async def test_stale_resize_is_rejected(session_factory, tour_date, fill):
    tour_date_id = tour_date.id
    booking_id = (await fill(tour_date_id, 4)).id

    async with session_factory() as first, session_factory() as second:
        mine = await load(first, booking_id)
        stale = await load(second, booking_id)

        await CapacityLedger(first).resize(mine, 3, 0)
        await first.commit()

        with pytest.raises(ConcurrencyConflictError):
            await CapacityLedger(second).resize(stale, 2, 0)
        await second.rollback()

    async with session_factory() as s:
        assert await seats_on(s, tour_date_id) == (3, 3)


async def test_cancel_after_concurrent_grow_is_rejected(session_factory, tour_date, fill):
    tour_date_id = tour_date.id
    booking_id = (await fill(tour_date_id, 4)).id

    async with session_factory() as first, session_factory() as second:
        mine = await load(first, booking_id)
        stale = await load(second, booking_id)

        await CapacityLedger(first).resize(mine, 4, 2)
        await first.commit()

        with pytest.raises(ConcurrencyConflictError):
            await CapacityLedger(second).change_status(stale, PaymentStatus.CANCELLED.value)
        await second.rollback()

    async with session_factory() as s:
        assert await seats_on(s, tour_date_id) == (6, 6)


async def test_delete_of_booking_cancelled_meanwhile_is_rejected(session_factory, tour_date, fill):
    tour_date_id = tour_date.id
    await fill(tour_date_id, 3)
    booking_id = (await fill(tour_date_id, 5)).id

    async with session_factory() as first, session_factory() as second:
        mine = await load(first, booking_id)
        stale = await load(second, booking_id)

        await CapacityLedger(first).change_status(mine, PaymentStatus.CANCELLED.value)
        await first.commit()

        with pytest.raises(ConcurrencyConflictError):
            await CapacityLedger(second).discard(stale)
        await second.rollback()

    async with session_factory() as s:
        assert await seats_on(s, tour_date_id) == (3, 3)


async def test_concurrent_cancellations_through_the_service(session_factory, tour_date, fill, customer):
    tour_date_id, customer_id = tour_date.id, customer.id
    await fill(tour_date_id, 6)
    booking_id = (await fill(tour_date_id, 4)).id

    async def cancel():
        async with session_factory() as s:
            return await BookingService(s).update_booking(
                booking_id, customer_id, False, payment_status=PaymentStatus.CANCELLED.value
            )

    results = await asyncio.gather(cancel(), cancel())

    assert [b.payment_status for b in results] == ["CANCELLED", "CANCELLED"]
    async with session_factory() as s:
        assert await seats_on(s, tour_date_id) == (6, 6)
