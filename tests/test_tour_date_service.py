from datetime import datetime, timedelta

import pytest

from tourbook.core import ConflictError, NotFoundError, ValidationError
from tourbook.services.booking_service import BookingService
from tourbook.services.tour_date_service import TourDateService


async def test_create_defaults_timezone_and_status(session, tour):
    service = TourDateService(session)

    tour_date = await service.create_tour_date(
        tour_id=tour.id,
        date_start=datetime(2030, 6, 1, 8, 0),
        capacity_max=12,
    )

    assert tour_date.timezone == "Europe/Rome"
    assert tour_date.status == "ACTIVE"
    assert tour_date.seats_booked == 0
    assert tour_date.tour.title == tour.title


async def test_create_requires_existing_tour(session):
    with pytest.raises(NotFoundError):
        await TourDateService(session).create_tour_date(
            tour_id="missing", date_start=datetime(2030, 6, 1), capacity_max=5
        )


async def test_create_rejects_inverted_capacity(session, tour):
    with pytest.raises(ValidationError):
        await TourDateService(session).create_tour_date(
            tour_id=tour.id, date_start=datetime(2030, 6, 1), capacity_max=5, capacity_min=6
        )


async def test_capacity_cannot_drop_below_booked_seats(session, tour_date, fill):
    tour_date_id = tour_date.id
    await fill(tour_date_id, 6)
    service = TourDateService(session)

    with pytest.raises(ConflictError) as exc_info:
        await service.update_tour_date(tour_date_id, {"capacity_max": 5})
    await session.rollback()
    assert exc_info.value.details == {"booked_seats": 6}

    updated = await service.update_tour_date(tour_date_id, {"capacity_max": 6, "status": "INACTIVE"})
    assert updated.capacity_max == 6
    assert updated.status == "INACTIVE"


async def test_date_with_live_bookings_cannot_be_deleted(session, tour_date, customer):
    bookings = BookingService(session)
    booking = await bookings.create_booking(customer.id, tour_date.id, 2)
    service = TourDateService(session)

    with pytest.raises(ConflictError):
        await service.delete_tour_date(tour_date.id)

    await bookings.delete_booking(booking.id, customer.id, False, request_refund=True)
    assert await service.delete_tour_date(tour_date.id) is True
    await session.commit()

    with pytest.raises(NotFoundError):
        await service.get_tour_date(tour_date.id)


async def test_list_filters_by_tour(session, tour, make_tour_date):
    soon = datetime(2030, 1, 1) + timedelta(days=1)
    await make_tour_date(capacity_max=5, date_start=soon + timedelta(days=2))
    await make_tour_date(capacity_max=5, date_start=soon)

    dates = await TourDateService(session).list_tour_dates(tour_id=tour.id)

    assert [d.date_start for d in dates] == sorted(d.date_start for d in dates)
    assert len(dates) == 2
    assert await TourDateService(session).list_tour_dates(tour_id="other") == []
