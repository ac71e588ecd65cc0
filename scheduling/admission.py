"""Booking admission.

A booking is admitted by taking the lowest free seat of its slot, where seats
run from 1 to the slot's effective capacity, and allocating the next ticket
for the appointment date. Both land in one insert guarded by unique
constraints (slot seat, ticket number). A collision means another request won
the race; the transaction is rolled back and the admission re-run against
fresh reads.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError

from models import db
from models.booking import Booking
from models.service import Service
from scheduling.capacity import effective_capacity
from scheduling.errors import BookingError, validation_error
from scheduling.lifecycle import cancelled_values, get_booking, transition
from scheduling.policy import BookingPolicy, local_now
from scheduling.tickets import allocate_ticket

logger = logging.getLogger(__name__)


def check_booking_time(day: date, slot: str, policy: BookingPolicy, now: datetime,
                       enforce_cutoff: bool = True) -> None:
    if slot not in policy.time_slots:
        raise validation_error(f"Time must be one of: {', '.join(policy.time_slots)}")

    today = now.date()
    if day < today:
        raise BookingError("PAST_DATE", "Cannot book appointments in the past")

    if enforce_cutoff and day == today:
        cutoff = policy.slot_start(day, slot) - timedelta(hours=policy.same_day_cutoff_hours)
        if now > cutoff:
            raise BookingError(
                "CUTOFF_VIOLATION",
                f"Same-day bookings must be made at least {policy.same_day_cutoff_hours} hours in advance",
            )

    if day > policy.last_bookable_date(today):
        raise BookingError(
            "BEYOND_BOOKING_WINDOW",
            f"Cannot book appointments more than {policy.booking_window_days} days in advance",
        )


def _resolve_service(service_id) -> Optional[Service]:
    if service_id is None:
        return None
    service = db.session.get(Service, service_id)
    if service is None or not service.is_active:
        raise validation_error("Unknown or inactive service")
    return service


def _free_seat(day: date, slot: str, capacity: int) -> int:
    seats = [
        seat for (seat,) in
        db.session.query(Booking.slot_seat)
        .filter(
            Booking.appointment_date == day,
            Booking.appointment_time == slot,
            Booking.status == "confirmed",
        )
        .all()
    ]
    if len(seats) >= capacity:
        raise BookingError("SLOT_FULL", "Time slot is fully booked")

    taken = {s for s in seats if s is not None}
    for seat in range(1, capacity + 1):
        if seat not in taken:
            return seat
    raise BookingError("SLOT_FULL", "Time slot is fully booked")


def admit(day: date, slot: str, policy: BookingPolicy, build: Callable[[Optional[Service]], Booking],
          now: Optional[datetime] = None, enforce_cutoff: bool = True, service_id=None,
          on_admitted: Optional[Callable[[Booking], None]] = None) -> Booking:
    """Admit one confirmed booking for (day, slot) or raise BookingError.

    ``build`` receives the resolved service (or None) and returns a fresh,
    unsaved Booking carrying the customer fields. ``on_admitted`` may stage
    further writes that must commit together with the new booking.
    """
    now = now or local_now()
    check_booking_time(day, slot, policy, now, enforce_cutoff=enforce_cutoff)
    service = _resolve_service(service_id)

    attempts = policy.max_admission_attempts
    for attempt in range(1, attempts + 1):
        capacity = effective_capacity(day, slot, policy, now.date())
        seat = _free_seat(day, slot, capacity)

        booking = build(service)
        booking.appointment_date = day
        booking.appointment_time = slot
        booking.slot_duration = policy.slot_duration_minutes
        booking.ticket_number = allocate_ticket(day)
        booking.slot_seat = seat
        booking.status = "confirmed"
        booking.confirmed_at = datetime.utcnow()
        db.session.add(booking)

        try:
            if on_admitted is not None:
                on_admitted(booking)
            db.session.commit()
        except BookingError:
            db.session.rollback()
            raise
        except IntegrityError:
            db.session.rollback()
            logger.info(
                "Admission collision for %s %s (attempt %d/%d), retrying",
                day.isoformat(), slot, attempt, attempts,
            )
            continue

        logger.info(
            "Admitted %s for %s %s (seat %d of %d)",
            booking.ticket_number, day.isoformat(), slot, seat, capacity,
        )
        return booking

    logger.warning("Gave up admitting %s %s after %d attempts", day.isoformat(), slot, attempts)
    raise BookingError("BOOKING_CONFLICT", "The time slot is busy, please try again")


def create_booking(data: dict, policy: BookingPolicy, user_id: Optional[int] = None,
                   now: Optional[datetime] = None, by_admin: bool = False) -> Booking:
    """Create a confirmed booking from already shape-validated input.

    Admin-created bookings skip the same-day cutoff and may carry admin notes.
    """
    def build(service):
        return Booking(
            user_id=user_id,
            service_id=service.id if service else None,
            customer_name=data["customer_name"],
            customer_email=data["customer_email"],
            customer_phone=data["customer_phone"],
            booking_for_name=data.get("booking_for_name"),
            special_request=data.get("special_request"),
            inspiration_photos=list(data.get("inspiration_photos") or []),
            admin_notes=data.get("admin_notes") if by_admin else None,
        )

    return admit(
        data["appointment_date"],
        data["appointment_time"],
        policy,
        build,
        now=now,
        enforce_cutoff=not by_admin,
        service_id=data.get("service_id"),
    )


def reschedule_booking(ticket_number: str, new_date: date, new_time: str, policy: BookingPolicy,
                       service_id=None, special_request: Optional[str] = None,
                       actor: str = "customer", now: Optional[datetime] = None):
    """Move a confirmed booking to a new slot.

    Returns (new_booking, original_booking). The replacement insert and the
    cancellation of the original commit in the same transaction, and the
    cancellation only applies while the original is still confirmed.
    """
    original = get_booking(ticket_number)
    if original.status != "confirmed":
        raise BookingError("INVALID_STATUS", "Can only reschedule confirmed bookings")

    original_id = original.id
    copied = {
        "user_id": original.user_id,
        "customer_name": original.customer_name,
        "customer_email": original.customer_email,
        "customer_phone": original.customer_phone,
        "booking_for_name": original.booking_for_name,
        "special_request": special_request or original.special_request,
        "inspiration_photos": list(original.inspiration_photos or []),
    }
    original_service_id = original.service_id

    def build(service):
        return Booking(
            original_booking_id=original_id,
            service_id=service.id if service else original_service_id,
            **copied
        )

    def cancel_original(new_booking):
        values = cancelled_values(f"Rescheduled to {new_booking.ticket_number}", actor)
        if not transition(original_id, ("confirmed",), values):
            raise BookingError("INVALID_STATUS", "Can only reschedule confirmed bookings")

    new_booking = admit(new_date, new_time, policy, build, now=now,
                        service_id=service_id, on_admitted=cancel_original)
    return new_booking, db.session.get(Booking, original_id)
