from datetime import date, datetime
from decimal import Decimal

import pytest

from models import db
from models.service import Service
from scheduling.admission import create_booking
from scheduling.errors import BookingError
from scheduling.lifecycle import cancel_booking, complete_booking
from scheduling.reports import booking_report, dashboard_stats

NOW = datetime(2025, 11, 10, 9, 0)
MONDAY = date(2025, 11, 17)
SATURDAY = date(2025, 11, 22)


def _service(name, price):
    service = Service(name=name, description=name, duration=40, price=Decimal(price))
    db.session.add(service)
    db.session.commit()
    return service


def test_booking_report(app, policy, booking_data):
    cut = _service("Cut", "35.00")
    color = _service("Color", "80.00")

    a = create_booking(booking_data(MONDAY, "10:00", service_id=cut.id), policy, now=NOW)
    b = create_booking(booking_data(SATURDAY, "10:00", service_id=color.id), policy, now=NOW)
    create_booking(booking_data(SATURDAY, "12:00", service_id=cut.id), policy, now=NOW)
    create_booking(booking_data(SATURDAY, "12:40"), policy, now=NOW)

    complete_booking(a.ticket_number)
    cancel_booking(b.ticket_number, "Sick")

    report = booking_report(MONDAY, SATURDAY, policy)

    assert report["total_bookings"] == 4
    assert report["confirmed"] == 2
    assert report["completed"] == 1
    assert report["cancelled"] == 1
    assert report["completion_rate"] == 50.0
    assert report["total_revenue"] == 35.0

    by_service = {s["service_name"]: s["count"] for s in report["by_service"]}
    assert by_service == {"Cut": 2, "Color": 1, "No Service": 1}

    assert report["by_day_of_week"] == [
        {"day": "Monday", "count": 1},
        {"day": "Saturday", "count": 3},
    ]

    slots = {s["time"]: s for s in report["by_time_slot"]}
    assert slots["10:00"]["count"] == 2
    # Mon-Wed at 2, Thu-Sat at 3
    assert slots["10:00"]["total_capacity"] == 2 * 3 + 3 * 3


def test_report_filters_by_status(app, policy, booking_data):
    b = create_booking(booking_data(MONDAY), policy, now=NOW)
    create_booking(booking_data(MONDAY, "10:40"), policy, now=NOW)
    cancel_booking(b.ticket_number, "Sick")

    report = booking_report(MONDAY, MONDAY, policy, status="cancelled")
    assert report["total_bookings"] == 1
    assert report["total_revenue"] is None
    assert report["completion_rate"] == 0.0


def test_dashboard_stats(app, policy, booking_data):
    today = date(2025, 11, 19)
    create_booking(booking_data(today, "14:00"), policy, now=datetime(2025, 11, 19, 9, 0))
    done = create_booking(booking_data(today, "12:00"), policy, now=datetime(2025, 11, 19, 9, 0))
    later = create_booking(booking_data(SATURDAY), policy, now=NOW)
    complete_booking(done.ticket_number)
    cancel_booking(later.ticket_number, "Travel")

    stats = dashboard_stats(today)
    assert stats == {
        "today_bookings": 2,
        "today_completed": 1,
        "today_upcoming": 1,
        "week_bookings": 3,
        "week_cancelled": 1,
    }


def test_report_range_is_capped(app, policy):
    start = date(2025, 1, 1)
    assert booking_report(start, date(2026, 1, 1), policy)["total_bookings"] == 0

    with pytest.raises(BookingError) as exc:
        booking_report(start, date(2026, 1, 2), policy)
    assert exc.value.code == "VALIDATION_ERROR"
