from datetime import datetime, timedelta


TOUR = {
    "title": "Lake Como by Boat",
    "description": "Villas and gardens from the water.",
    "price_adult": "80.00",
    "price_child": "40.00",
    "language": "it",
    "itinerary": "Como, Bellagio, Varenna.",
    "duration_value": 6,
    "duration_unit": "hours",
    "cover_image": "images/como.jpg",
    "includes": ["Boat ticket"],
}


async def test_admin_creates_tour_and_dates(client, headers, admin):
    resp = await client.post("/api/v1/tours/", headers=headers(admin), json=TOUR)
    assert resp.status_code == 201
    tour = resp.json()
    assert tour["slug"] == "lake-como-by-boat"
    assert tour["dates"] == []

    resp = await client.post("/api/v1/tours/", headers=headers(admin), json=TOUR)
    assert resp.status_code == 409

    start = (datetime.now() + timedelta(days=10)).replace(microsecond=0)
    resp = await client.post("/api/v1/tour-dates/", headers=headers(admin), json={
        "tour_id": tour["id"], "date_start": start.isoformat(), "capacity_max": 20,
    })
    assert resp.status_code == 201
    tour_date = resp.json()
    assert tour_date["available_seats"] == 20
    assert tour_date["timezone"] == "Europe/Rome"

    resp = await client.get("/api/v1/tours/lake-como-by-boat")
    assert resp.status_code == 200
    assert [d["id"] for d in resp.json()["dates"]] == [tour_date["id"]]


async def test_customers_cannot_write_catalog(client, headers, customer):
    resp = await client.post("/api/v1/tours/", headers=headers(customer), json=TOUR)
    assert resp.status_code == 403


async def test_catalog_filters(client, tour, make_tour_date):
    day = datetime(2031, 5, 4, 9, 0)
    await make_tour_date(capacity_max=5, date_start=day)

    resp = await client.get("/api/v1/tours/", params={"destination": "dolomites"})
    assert [t["slug"] for t in resp.json()] == ["dolomites-day-hike"]

    resp = await client.get("/api/v1/tours/", params={"max_price": "40"})
    assert resp.json() == []

    resp = await client.get("/api/v1/tours/", params={"date": "2031-05-04"})
    assert len(resp.json()) == 1

    resp = await client.get("/api/v1/tours/", params={"date": "2031-05-05"})
    assert resp.json() == []


async def test_inactive_and_past_dates_are_hidden(client, tour, make_tour_date):
    await make_tour_date(capacity_max=5, status="INACTIVE")
    await make_tour_date(capacity_max=5, date_start=datetime(2001, 1, 1))
    visible = await make_tour_date(capacity_max=5)

    resp = await client.get(f"/api/v1/tours/{tour.id}")

    assert [d["id"] for d in resp.json()["dates"]] == [visible.id]


async def test_lowering_capacity_below_bookings_conflicts(client, headers, admin, tour_date, fill):
    await fill(tour_date.id, 4)

    resp = await client.patch(f"/api/v1/tour-dates/{tour_date.id}", headers=headers(admin),
                              json={"capacity_max": 3})
    assert resp.status_code == 409

    resp = await client.patch(f"/api/v1/tour-dates/{tour_date.id}", headers=headers(admin),
                              json={"capacity_max": 4})
    assert resp.status_code == 200
    assert resp.json()["available_seats"] == 0


async def test_tour_with_bookings_cannot_be_deleted(client, headers, admin, tour, tour_date, fill):
    await fill(tour_date.id, 1)

    resp = await client.delete(f"/api/v1/tours/{tour.id}", headers=headers(admin))
    assert resp.status_code == 409
