from datetime import date, datetime

from models import db
from models.booking import Booking
from scheduling.admission import create_booking
from scheduling.tickets import allocate_ticket, format_ticket, next_sequence, normalize_ticket, parse_ticket

DAY = date(2025, 11, 20)
NOW = datetime(2025, 11, 10, 9, 0)


def _insert(ticket, day=DAY, status="cancelled"):
    db.session.add(Booking(
        ticket_number=ticket,
        appointment_date=day,
        appointment_time="10:00",
        status=status,
        customer_name="Seed",
        customer_email="seed@example.com",
        customer_phone="+14155550100",
    ))
    db.session.commit()


def test_format_pads_to_three_digits():
    assert format_ticket(DAY, 1) == "TKT-20251120-001"
    assert format_ticket(DAY, 42) == "TKT-20251120-042"


def test_format_past_999_prints_in_full():
    assert format_ticket(DAY, 1000) == "TKT-20251120-1000"


def test_parse_ticket():
    assert parse_ticket("TKT-20251120-007") == (DAY, 7)
    assert parse_ticket(" tkt-20251120-1000 ") == (DAY, 1000)
    assert parse_ticket("TKT-20251320-001") is None
    assert parse_ticket("TKT-20251120-01") is None
    assert parse_ticket("BOOK-1") is None


def test_normalize_ticket():
    assert normalize_ticket("  tkt-20251120-003 ") == "TKT-20251120-003"
    assert normalize_ticket(None) == ""


def test_first_ticket_of_the_day(app):
    assert next_sequence(DAY) == 1
    assert allocate_ticket(DAY) == "TKT-20251120-001"


def test_sequence_follows_max_including_cancelled(app):
    _insert("TKT-20251120-001")
    _insert("TKT-20251120-004")
    assert allocate_ticket(DAY) == "TKT-20251120-005"


def test_sequence_is_per_date(app):
    _insert("TKT-20251120-009")
    assert allocate_ticket(date(2025, 11, 21)) == "TKT-20251121-001"


def test_sequence_compares_numerically_past_999(app):
    _insert("TKT-20251120-999")
    _insert("TKT-20251120-1000")
    assert allocate_ticket(DAY) == "TKT-20251120-1001"


def test_admissions_on_one_date_get_increasing_tickets(app, policy, booking_data):
    a = create_booking(booking_data(DAY, "10:00"), policy, now=NOW)
    b = create_booking(booking_data(DAY, "12:40"), policy, now=NOW)
    c = create_booking(booking_data(DAY, "10:00"), policy, now=NOW)
    assert [a.ticket_number, b.ticket_number, c.ticket_number] == [
        "TKT-20251120-001",
        "TKT-20251120-002",
        "TKT-20251120-003",
    ]


def test_stale_sequence_is_retried(app, policy, booking_data, monkeypatch):
    _insert("TKT-20251120-001")

    import scheduling.admission as admission
    real = admission.allocate_ticket
    calls = []

    def stale_then_real(day):
        calls.append(day)
        if len(calls) == 1:
            # what a concurrent writer that read the same max would have picked
            return "TKT-20251120-001"
        return real(day)

    monkeypatch.setattr(admission, "allocate_ticket", stale_then_real)

    booking = create_booking(booking_data(DAY, "11:20"), policy, now=NOW)
    assert len(calls) == 2
    assert booking.ticket_number == "TKT-20251120-002"
    assert Booking.query.filter_by(ticket_number="TKT-20251120-001").count() == 1
