from flask import Blueprint, request, jsonify, g

from scheduling.admission import create_booking, reschedule_booking
from scheduling.errors import BookingError
from scheduling.lifecycle import cancel_booking, get_booking, list_user_bookings, search_bookings
from scheduling.policy import current_policy
from security.rbac import is_admin
from utils.audit import log_event
from utils.auth_context import current_user_id, login_required
from utils.serializers import booking_json
from utils.validators import booking_input, parse_date, reschedule_input

booking_bp = Blueprint("booking", __name__, url_prefix="/bookings")


# ---------- CUSTOMERS: book a slot (capacity-safe) ----------
@booking_bp.post("")
def create():
    data = request.get_json(silent=True) or {}
    policy = current_policy()
    cleaned = booking_input(data, policy.time_slots)

    try:
        booking = create_booking(cleaned, policy, user_id=current_user_id())
    except BookingError as e:
        if e.code == "SLOT_FULL":
            log_event(
                "BOOKING_FAIL_SLOT_FULL",
                user_id=current_user_id(),
                entity="slot",
                entity_id=f"{cleaned['appointment_date'].isoformat()} {cleaned['appointment_time']}",
            )
        raise

    log_event(
        "BOOKING_CREATE",
        user_id=current_user_id(),
        entity="booking",
        entity_id=booking.id,
        metadata={"ticket_number": booking.ticket_number},
    )
    return jsonify(
        booking=booking_json(booking),
        message=f"Booking confirmed! Your ticket number is {booking.ticket_number}",
    ), 201


# ---------- CUSTOMERS: find a booking ----------
@booking_bp.get("/search")
def search():
    ticket_number = request.args.get("ticket_number")
    phone = request.args.get("phone")
    date_str = request.args.get("date")

    if ticket_number is not None:
        rows = search_bookings(ticket_number=ticket_number)
    elif phone and date_str:
        rows = search_bookings(phone=phone, day=parse_date(date_str))
    else:
        rows = search_bookings()

    return jsonify(bookings=[booking_json(b) for b in rows], total=len(rows)), 200


@booking_bp.get("/me")
@login_required
def my_bookings():
    rows = list_user_bookings(g.user.id, status=request.args.get("status"))
    return jsonify(bookings=[booking_json(b) for b in rows], total=len(rows)), 200


@booking_bp.get("/<ticket_number>")
def detail(ticket_number: str):
    booking = get_booking(ticket_number)
    service = booking.service
    return jsonify(
        booking=booking_json(booking),
        service_name=service.name if service else None,
        service_duration=service.duration if service else None,
        service_price=float(service.price) if service and service.price is not None else None,
    ), 200


# ---------- CUSTOMERS: cancel (admins are recorded as the actor) ----------
@booking_bp.post("/<ticket_number>/cancel")
def cancel(ticket_number: str):
    data = request.get_json(silent=True) or {}
    actor = "admin" if is_admin() else "customer"

    booking = cancel_booking(ticket_number, data.get("cancellation_reason"), actor=actor)

    log_event(
        "BOOKING_CANCEL",
        user_id=current_user_id(),
        entity="booking",
        entity_id=booking.id,
        metadata={"reason": booking.cancellation_reason, "actor": actor},
    )
    return jsonify(booking=booking_json(booking), message="Booking cancelled successfully"), 200


@booking_bp.post("/<ticket_number>/reschedule")
def reschedule(ticket_number: str):
    data = request.get_json(silent=True) or {}
    policy = current_policy()
    cleaned = reschedule_input(data, policy.time_slots)
    actor = "admin" if is_admin() else "customer"

    new_booking, original = reschedule_booking(
        ticket_number,
        cleaned["new_date"],
        cleaned["new_time"],
        policy,
        service_id=cleaned["service_id"],
        special_request=cleaned["special_request"],
        actor=actor,
    )

    log_event(
        "BOOKING_RESCHEDULE",
        user_id=current_user_id(),
        entity="booking",
        entity_id=new_booking.id,
        metadata={"from": original.ticket_number, "to": new_booking.ticket_number},
    )
    return jsonify(
        new_booking=booking_json(new_booking),
        original_booking=booking_json(original),
        message=f"Booking rescheduled successfully. New ticket number: {new_booking.ticket_number}",
    ), 201
