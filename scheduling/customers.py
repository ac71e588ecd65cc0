"""Admin view of customers, aggregated from bookings.

A registered customer is keyed by their user id; a guest by
``guest-<email>`` taken from the booking contact fields.
"""
from typing import List, Optional, Tuple

from sqlalchemy import String, case, cast, func, literal_column

from models import db
from models.booking import Booking
from models.customer_note import CustomerNote
from models.user import User
from scheduling.errors import BookingError, validation_error

CUSTOMER_TYPES = ("registered", "guest")
MAX_NOTE_LENGTH = 2000

customer_key = case(
    (Booking.user_id.isnot(None), cast(Booking.user_id, String)),
    else_=literal_column("'guest-'", String) + Booking.customer_email,
)

_email = func.coalesce(func.max(User.email), func.max(Booking.customer_email))
_name = func.coalesce(func.max(User.full_name), func.max(Booking.customer_name))
_phone = func.coalesce(func.max(User.phone_number), func.max(Booking.customer_phone))
_total = func.count(Booking.id)
_last = func.max(Booking.appointment_date)
_first = func.min(Booking.created_at)

SORT_FIELDS = {
    "name": _name,
    "email": _email,
    "total_bookings": _total,
    "last_booking_date": _last,
    "first_booking_date": _first,
}


def _status_count(status: str):
    return func.sum(case((Booking.status == status, 1), else_=0))


def _customers_query():
    return (
        db.session.query(
            customer_key.label("customer_id"),
            func.max(Booking.user_id).label("user_id"),
            _email.label("email"),
            _name.label("name"),
            _phone.label("phone"),
            _total.label("total_bookings"),
            _status_count("completed").label("completed_bookings"),
            _status_count("cancelled").label("cancelled_bookings"),
            _last.label("last_booking_date"),
            _first.label("first_booking_date"),
        )
        .select_from(Booking)
        .outerjoin(User, Booking.user_id == User.id)
        .group_by(customer_key)
    )


def _row_json(row) -> dict:
    return {
        "customer_id": row.customer_id,
        "customer_type": "registered" if row.user_id is not None else "guest",
        "user_id": row.user_id,
        "email": row.email,
        "name": row.name,
        "phone": row.phone,
        "total_bookings": int(row.total_bookings or 0),
        "completed_bookings": int(row.completed_bookings or 0),
        "cancelled_bookings": int(row.cancelled_bookings or 0),
        "last_booking_date": row.last_booking_date.isoformat() if row.last_booking_date else None,
        "first_booking_date": row.first_booking_date.isoformat() if row.first_booking_date else None,
    }


def list_customers(customer_type: Optional[str] = None, search: Optional[str] = None,
                   sort_by: str = "total_bookings", sort_order: str = "desc",
                   limit: int = 50, offset: int = 0) -> Tuple[List[dict], int]:
    q = _customers_query()
    if customer_type:
        if customer_type not in CUSTOMER_TYPES:
            raise validation_error("type must be registered or guest")
        if customer_type == "registered":
            q = q.filter(Booking.user_id.isnot(None))
        else:
            q = q.filter(Booking.user_id.is_(None))
    if search and search.strip():
        like = f"%{search.strip()}%"
        q = q.having(_name.ilike(like) | _email.ilike(like) | _phone.ilike(like))

    total = db.session.query(func.count()).select_from(q.subquery()).scalar()

    column = SORT_FIELDS.get(sort_by, _total)
    if str(sort_order).lower() == "asc":
        q = q.order_by(column.asc(), customer_key.asc())
    else:
        q = q.order_by(column.desc(), customer_key.asc())

    limit = max(1, min(int(limit), 200))
    offset = max(0, int(offset))
    return [_row_json(r) for r in q.offset(offset).limit(limit).all()], total


def get_customer(customer_id: str) -> dict:
    row = _customers_query().filter(customer_key == customer_id).first()
    if row is None:
        raise BookingError("NOT_FOUND", "Customer not found")
    return _row_json(row)


def _note_text(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise validation_error("Note text is required")
    value = value.strip()
    if len(value) > MAX_NOTE_LENGTH:
        raise validation_error(f"Note text must be at most {MAX_NOTE_LENGTH} characters")
    return value


def _get_note(customer_id: str, note_id: int) -> CustomerNote:
    note = CustomerNote.query.filter_by(id=note_id, customer_id=customer_id).first()
    if note is None:
        raise BookingError("NOT_FOUND", "Note not found")
    return note


def list_notes(customer_id: str) -> List[CustomerNote]:
    return (
        CustomerNote.query
        .filter_by(customer_id=customer_id)
        .order_by(CustomerNote.created_at.desc(), CustomerNote.id.desc())
        .all()
    )


def add_note(customer_id: str, note_text, created_by: str) -> CustomerNote:
    text = _note_text(note_text)
    get_customer(customer_id)
    note = CustomerNote(customer_id=customer_id, note_text=text, created_by=created_by or "Admin")
    db.session.add(note)
    db.session.commit()
    return note


def update_note(customer_id: str, note_id: int, note_text) -> CustomerNote:
    text = _note_text(note_text)
    note = _get_note(customer_id, note_id)
    note.note_text = text
    db.session.commit()
    return note


def delete_note(customer_id: str, note_id: int) -> None:
    db.session.delete(_get_note(customer_id, note_id))
    db.session.commit()
