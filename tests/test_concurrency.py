"""Concurrent writers against a file-backed SQLite database.

Each worker runs in its own thread with its own app context, so every worker
holds a separate session and connection.
"""
import threading
from datetime import date, datetime

import pytest

from app import create_app
from models import db
from models.booking import Booking
from scheduling import admission, lifecycle
from scheduling.admission import create_booking, reschedule_booking
from scheduling.errors import BookingError
from scheduling.lifecycle import cancel_booking, complete_booking
from scheduling.policy import BookingPolicy

THURSDAY = date(2025, 11, 20)
NOW = datetime(2025, 11, 10, 9, 0)


@pytest.fixture
def file_app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'salon.db'}",
        "SQLALCHEMY_ENGINE_OPTIONS": {"connect_args": {"timeout": 30}},
        "AUTO_CREATE_TABLES": True,
        "LOG_LEVEL": "WARNING",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


def run_together(app, *fns):
    """Run each callable in its own thread; return results or BookingErrors in order."""
    results = [None] * len(fns)
    go = threading.Event()

    def worker(i, fn):
        with app.app_context():
            go.wait(10)
            try:
                results[i] = fn()
            except BookingError as err:
                results[i] = err
            finally:
                db.session.remove()

    threads = [threading.Thread(target=worker, args=(i, fn)) for i, fn in enumerate(fns)]
    for t in threads:
        t.start()
    go.set()
    for t in threads:
        t.join(60)
    assert not any(t.is_alive() for t in threads)
    return results


def meet_after(module, monkeypatch, parties):
    """Make ``module.get_booking`` wait until every caller has read its row."""
    barrier = threading.Barrier(parties, timeout=10)
    real = module.get_booking

    def stale_get(ticket_number):
        booking = real(ticket_number)
        barrier.wait()
        return booking

    monkeypatch.setattr(module, "get_booking", stale_get)


def _booking(app, data):
    with app.app_context():
        ticket = create_booking(data, BookingPolicy(), now=NOW).ticket_number
        db.session.remove()
    return ticket


def test_parallel_admission_never_overbooks(file_app, booking_data):
    policy = BookingPolicy()

    def book():
        return create_booking(booking_data(THURSDAY, "10:00"), policy, now=NOW).ticket_number

    results = run_together(file_app, *([book] * 8))

    admitted = [r for r in results if isinstance(r, str)]
    refused = [r.code for r in results if isinstance(r, BookingError)]
    assert len(admitted) + len(refused) == 8
    assert 1 <= len(admitted) <= 3
    assert set(refused) <= {"SLOT_FULL", "BOOKING_CONFLICT"}

    with file_app.app_context():
        confirmed = Booking.query.filter_by(appointment_date=THURSDAY, status="confirmed").all()
        assert sorted(b.ticket_number for b in confirmed) == sorted(admitted)
        assert len({b.slot_seat for b in confirmed}) == len(confirmed)
        assert len({b.ticket_number for b in Booking.query.all()}) == Booking.query.count()


def test_parallel_reschedules_move_booking_once(file_app, booking_data, monkeypatch):
    policy = BookingPolicy()
    ticket = _booking(file_app, booking_data(THURSDAY, "10:00"))
    meet_after(admission, monkeypatch, 2)

    def move_to(slot):
        return lambda: reschedule_booking(ticket, THURSDAY, slot, policy, now=NOW)[0].ticket_number

    results = run_together(file_app, move_to("12:00"), move_to("12:40"))

    moved = [r for r in results if isinstance(r, str)]
    refused = [r.code for r in results if isinstance(r, BookingError)]
    assert len(moved) == 1
    assert refused == ["INVALID_STATUS"]

    with file_app.app_context():
        original = Booking.query.filter_by(ticket_number=ticket).one()
        assert original.status == "cancelled"
        assert original.cancellation_reason == f"Rescheduled to {moved[0]}"
        replacements = Booking.query.filter_by(original_booking_id=original.id).all()
        assert [b.ticket_number for b in replacements] == moved
        assert Booking.query.filter_by(status="confirmed").count() == 1


def test_parallel_cancels_succeed_once(file_app, booking_data, monkeypatch):
    ticket = _booking(file_app, booking_data(THURSDAY, "10:00"))
    meet_after(lifecycle, monkeypatch, 2)

    def cancel(reason):
        return lambda: cancel_booking(ticket, reason).cancellation_reason

    results = run_together(file_app, cancel("Sick"), cancel("Travel"))

    winners = [r for r in results if isinstance(r, str)]
    refused = [r.code for r in results if isinstance(r, BookingError)]
    assert len(winners) == 1
    assert refused == ["ALREADY_CANCELLED"]

    with file_app.app_context():
        booking = Booking.query.filter_by(ticket_number=ticket).one()
        assert booking.cancellation_reason == winners[0]


def test_cancel_and_complete_race_has_one_outcome(file_app, booking_data, monkeypatch):
    ticket = _booking(file_app, booking_data(THURSDAY, "10:00"))
    meet_after(lifecycle, monkeypatch, 2)

    results = run_together(
        file_app,
        lambda: cancel_booking(ticket, "Sick", actor="admin").status,
        lambda: complete_booking(ticket).status,
    )

    with file_app.app_context():
        final = Booking.query.filter_by(ticket_number=ticket).one().status

    if final == "cancelled":
        assert results[0] == "cancelled"
        assert results[1].code == "CANNOT_COMPLETE_CANCELLED"
    else:
        assert final == "completed"
        assert results[1] == "completed"
        assert results[0].code == "CANNOT_CANCEL_COMPLETED"
