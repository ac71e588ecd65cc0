"""Booking lookups and status transitions after admission."""
import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_

from models import db
from models.booking import BOOKING_STATUSES, Booking
from scheduling.errors import BookingError, booking_not_found, validation_error
from scheduling.tickets import normalize_ticket

logger = logging.getLogger(__name__)

OPEN_STATUSES = ("pending", "confirmed")
CANCEL_ACTORS = ("customer", "admin")
MAX_REASON_LENGTH = 255

ADMIN_SORT_FIELDS = {
    "appointment_date": Booking.appointment_date,
    "appointment_time": Booking.appointment_time,
    "customer_name": Booking.customer_name,
    "ticket_number": Booking.ticket_number,
    "created_at": Booking.created_at,
    "status": Booking.status,
}


def find_by_ticket(ticket_number: str) -> Optional[Booking]:
    return (
        Booking.query
        .filter(func.upper(Booking.ticket_number) == normalize_ticket(ticket_number))
        .first()
    )


def get_booking(ticket_number: str) -> Booking:
    booking = find_by_ticket(ticket_number)
    if booking is None:
        raise booking_not_found()
    return booking


def cancelled_values(reason: str, actor: str) -> dict:
    return {
        "status": "cancelled",
        "cancelled_at": datetime.utcnow(),
        "cancelled_by": actor,
        "cancellation_reason": reason,
        "slot_seat": None,
    }


def transition(booking_id: int, from_statuses, values: dict) -> bool:
    """Conditionally move a booking out of ``from_statuses``; the caller commits.

    The status test runs inside the UPDATE, so of two concurrent writers only
    one changes the row. Returns False when the row was no longer in one of
    ``from_statuses``.
    """
    changed = (
        Booking.query
        .filter(Booking.id == booking_id, Booking.status.in_(from_statuses))
        .update(values, synchronize_session=False)
    )
    return changed == 1


def _reject_cancel(booking: Booking) -> None:
    if booking.status == "cancelled":
        raise BookingError("ALREADY_CANCELLED", "Booking already cancelled")
    if booking.status == "completed":
        raise BookingError("CANNOT_CANCEL_COMPLETED", "Cannot cancel completed booking")


def _reject_complete(booking: Booking) -> None:
    if booking.status == "completed":
        raise BookingError("ALREADY_COMPLETED", "Booking already completed")
    if booking.status == "cancelled":
        raise BookingError("CANNOT_COMPLETE_CANCELLED", "Cannot complete cancelled booking")


def _apply(booking: Booking, values: dict, reject) -> Booking:
    reject(booking)
    if not transition(booking.id, OPEN_STATUSES, values):
        # lost the race; rollback expires the stale copy
        db.session.rollback()
        reject(booking)
        raise BookingError("INVALID_STATUS", f"Booking is {booking.status}")
    db.session.commit()
    return booking


def cancel_booking(ticket_number: str, reason: str, actor: str = "customer") -> Booking:
    reason = (reason or "").strip()
    if not reason:
        raise validation_error("Cancellation reason is required")
    if len(reason) > MAX_REASON_LENGTH:
        raise validation_error(f"Cancellation reason must be at most {MAX_REASON_LENGTH} characters")
    if actor not in CANCEL_ACTORS:
        raise validation_error("actor must be customer or admin")

    booking = _apply(get_booking(ticket_number), cancelled_values(reason, actor), _reject_cancel)
    logger.info("Cancelled %s by %s", booking.ticket_number, actor)
    return booking


def complete_booking(ticket_number: str) -> Booking:
    values = {"status": "completed", "completed_at": datetime.utcnow(), "slot_seat": None}
    booking = _apply(get_booking(ticket_number), values, _reject_complete)
    logger.info("Completed %s", booking.ticket_number)
    return booking


def update_admin_notes(ticket_number: str, admin_notes: Optional[str]) -> Booking:
    booking = get_booking(ticket_number)
    if admin_notes is not None and not isinstance(admin_notes, str):
        raise validation_error("admin_notes must be a string")
    booking.admin_notes = admin_notes.strip() if admin_notes else None
    db.session.commit()
    return booking


def search_bookings(ticket_number: Optional[str] = None, phone: Optional[str] = None,
                    day: Optional[date] = None) -> List[Booking]:
    if ticket_number is not None:
        if not normalize_ticket(ticket_number):
            raise BookingError("INVALID_SEARCH_PARAMS", "Invalid ticket number format")
        booking = find_by_ticket(ticket_number)
        return [booking] if booking else []

    if phone and day:
        return (
            Booking.query
            .filter(Booking.customer_phone == phone.strip(), Booking.appointment_date == day)
            .order_by(Booking.appointment_time.asc())
            .all()
        )

    raise BookingError("INVALID_SEARCH_PARAMS", "Provide either 'ticket_number' OR both 'phone' and 'date'")


def list_user_bookings(user_id: int, status: Optional[str] = None) -> List[Booking]:
    q = Booking.query.filter_by(user_id=user_id)
    if status:
        if status not in BOOKING_STATUSES:
            raise validation_error("Unknown status filter")
        q = q.filter_by(status=status)
    return q.order_by(Booking.appointment_date.desc(), Booking.appointment_time.desc()).all()


def list_bookings(status: Optional[str] = None, service_id: Optional[int] = None,
                  date_from: Optional[date] = None, date_to: Optional[date] = None,
                  query: Optional[str] = None, sort_by: str = "appointment_date",
                  sort_order: str = "desc", limit: int = 50, offset: int = 0) -> Tuple[List[Booking], int]:
    q = Booking.query
    if status:
        if status not in BOOKING_STATUSES:
            raise validation_error("Unknown status filter")
        q = q.filter(Booking.status == status)
    if service_id is not None:
        q = q.filter(Booking.service_id == service_id)
    if date_from:
        q = q.filter(Booking.appointment_date >= date_from)
    if date_to:
        q = q.filter(Booking.appointment_date <= date_to)
    if query:
        like = f"%{query.strip()}%"
        q = q.filter(or_(
            Booking.ticket_number.ilike(like),
            Booking.customer_name.ilike(like),
            Booking.customer_phone.ilike(like),
            Booking.customer_email.ilike(like),
        ))

    total = q.count()

    column = ADMIN_SORT_FIELDS.get(sort_by, Booking.appointment_date)
    if str(sort_order).lower() == "asc":
        q = q.order_by(column.asc(), Booking.appointment_time.asc())
    else:
        q = q.order_by(column.desc(), Booking.appointment_time.desc())

    limit = max(1, min(int(limit), 200))
    offset = max(0, int(offset))
    return q.offset(offset).limit(limit).all(), total
