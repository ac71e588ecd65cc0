from datetime import date, timedelta


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_day_availability(client, policy, next_week):
    resp = client.get(f"/availability/{next_week.isoformat()}")
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["date"] == next_week.isoformat()
    assert body["total_capacity"] == 8 * policy.base_capacity(next_week)
    assert [s["time"] for s in body["slots"]] == list(policy.time_slots)


def test_slot_availability(client, next_week):
    resp = client.get(f"/availability/{next_week.isoformat()}/12:40")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "available"

    resp = client.get(f"/availability/{next_week.isoformat()}/09:00")
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_range_availability(client, next_week):
    end = next_week + timedelta(days=2)
    resp = client.get(f"/availability?start_date={next_week.isoformat()}&end_date={end.isoformat()}")
    assert resp.status_code == 200
    assert len(resp.get_json()["dates"]) == 3

    assert client.get("/availability?start_date=2025-01-01").status_code == 400


def test_malformed_date(client):
    resp = client.get("/availability/2025-02-30")
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_guest_booking_flow(client, payload, next_week):
    resp = client.post("/bookings", json=payload(next_week, "11:20"))
    assert resp.status_code == 201
    booking = resp.get_json()["booking"]
    ticket = booking["ticket_number"]
    assert ticket == f"TKT-{next_week:%Y%m%d}-001"
    assert booking["status"] == "confirmed"
    assert booking["user_id"] is None

    resp = client.get(f"/bookings/{ticket.lower()}")
    assert resp.status_code == 200
    assert resp.get_json()["booking"]["ticket_number"] == ticket

    resp = client.get(f"/bookings/search?ticket_number={ticket}")
    assert resp.get_json()["total"] == 1

    resp = client.get(f"/bookings/search?phone=%2B14155550123&date={next_week.isoformat()}")
    assert resp.get_json()["total"] == 1

    resp = client.post(f"/bookings/{ticket}/cancel", json={"cancellation_reason": "Can't make it"})
    assert resp.status_code == 200
    assert resp.get_json()["booking"]["cancelled_by"] == "customer"

    resp = client.post(f"/bookings/{ticket}/cancel", json={"cancellation_reason": "Again"})
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "ALREADY_CANCELLED"


def test_slot_full_over_http(client, payload, policy, next_week):
    for _ in range(policy.base_capacity(next_week)):
        assert client.post("/bookings", json=payload(next_week, "14:20")).status_code == 201

    resp = client.post("/bookings", json=payload(next_week, "14:20"))
    assert resp.status_code == 409
    assert resp.get_json() == {"error": "Time slot is fully booked", "code": "SLOT_FULL"}


def test_booking_rejections(client, payload):
    yesterday = date.today() - timedelta(days=1)
    resp = client.post("/bookings", json=payload(yesterday))
    assert resp.get_json()["code"] == "PAST_DATE"

    resp = client.post("/bookings", json=payload(date.today() + timedelta(days=91)))
    assert resp.get_json()["code"] == "BEYOND_BOOKING_WINDOW"

    resp = client.post("/bookings", json=payload(date.today() + timedelta(days=3), customer_phone="12345"))
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_reschedule_over_http(client, payload, next_week):
    ticket = client.post("/bookings", json=payload(next_week)).get_json()["booking"]["ticket_number"]
    target = next_week + timedelta(days=1)

    resp = client.post(f"/bookings/{ticket}/reschedule", json={
        "new_appointment_date": target.isoformat(),
        "new_appointment_time": "13:20",
    })
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["new_booking"]["appointment_date"] == target.isoformat()
    assert body["new_booking"]["original_booking_id"] == body["original_booking"]["id"]
    assert body["original_booking"]["status"] == "cancelled"

    resp = client.post(f"/bookings/{ticket}/reschedule", json={"new_appointment_date": target.isoformat()})
    assert resp.status_code == 400


def test_search_requires_params(client):
    resp = client.get("/bookings/search")
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "INVALID_SEARCH_PARAMS"


def test_unknown_ticket(client):
    resp = client.get("/bookings/TKT-20990101-001")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "BOOKING_NOT_FOUND"


def test_unknown_route_is_json(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "NOT_FOUND"


def test_public_services(client):
    resp = client.get("/services")
    assert resp.status_code == 200
    assert resp.get_json() == {"services": []}
