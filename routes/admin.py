from flask import Blueprint, jsonify, g, request

from scheduling import catalog, customers, overrides
from scheduling.admission import create_booking
from scheduling.errors import validation_error
from scheduling.lifecycle import cancel_booking, complete_booking, list_bookings, update_admin_notes
from scheduling.policy import current_policy, local_now
from scheduling.reports import booking_report, dashboard_stats
from security.rbac import require_roles
from utils.audit import log_event
from utils.serializers import booking_json, note_json, override_json, service_json
from utils.validators import booking_input, parse_date, parse_optional_date, parse_time

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


# ---------- bookings ----------
@admin_bp.get("/bookings")
@require_roles("ADMIN")
def bookings():
    rows, total = list_bookings(
        status=request.args.get("status"),
        service_id=request.args.get("service_id", type=int),
        date_from=parse_optional_date(request.args.get("appointment_date_from"), "appointment_date_from"),
        date_to=parse_optional_date(request.args.get("appointment_date_to"), "appointment_date_to"),
        query=request.args.get("query"),
        sort_by=request.args.get("sort_by", "appointment_date"),
        sort_order=request.args.get("sort_order", "desc"),
        limit=request.args.get("limit", 50, type=int),
        offset=request.args.get("offset", 0, type=int),
    )
    return jsonify(bookings=[booking_json(b) for b in rows], total=total), 200


@admin_bp.post("/bookings")
@require_roles("ADMIN")
def manual_booking():
    data = request.get_json(silent=True) or {}
    policy = current_policy()
    cleaned = booking_input(data, policy.time_slots, admin=True)

    booking = create_booking(cleaned, policy, by_admin=True)

    log_event("ADMIN_BOOKING_CREATE", user_id=g.user.id, entity="booking", entity_id=booking.id,
              metadata={"ticket_number": booking.ticket_number})
    return jsonify(booking=booking_json(booking), message="Manual booking created successfully"), 201


@admin_bp.patch("/bookings/<ticket_number>")
@require_roles("ADMIN")
def edit_booking(ticket_number: str):
    data = request.get_json(silent=True) or {}
    if "admin_notes" not in data:
        raise validation_error("admin_notes is required")

    booking = update_admin_notes(ticket_number, data.get("admin_notes"))

    log_event("ADMIN_BOOKING_UPDATE", user_id=g.user.id, entity="booking", entity_id=booking.id)
    return jsonify(booking=booking_json(booking), message="Booking updated successfully"), 200


@admin_bp.post("/bookings/<ticket_number>/complete")
@require_roles("ADMIN")
def complete(ticket_number: str):
    booking = complete_booking(ticket_number)
    log_event("ADMIN_BOOKING_COMPLETE", user_id=g.user.id, entity="booking", entity_id=booking.id)
    return jsonify(booking=booking_json(booking), message="Booking marked as completed successfully"), 200


@admin_bp.post("/bookings/<ticket_number>/cancel")
@require_roles("ADMIN")
def admin_cancel(ticket_number: str):
    data = request.get_json(silent=True) or {}
    reason = data.get("cancellation_reason") or "Admin cancellation"

    booking = cancel_booking(ticket_number, reason, actor="admin")

    log_event("ADMIN_BOOKING_CANCEL", user_id=g.user.id, entity="booking", entity_id=booking.id,
              metadata={"reason": booking.cancellation_reason})
    return jsonify(booking=booking_json(booking), message="Cancelled by admin"), 200


# ---------- services ----------
@admin_bp.get("/services")
@require_roles("ADMIN")
def services():
    rows = catalog.list_services(active_only=False)
    return jsonify(services=[service_json(s) for s in rows]), 200


@admin_bp.post("/services")
@require_roles("ADMIN")
def create_service():
    service = catalog.create_service(request.get_json(silent=True) or {})
    log_event("SERVICE_CREATE", user_id=g.user.id, entity="service", entity_id=service.id)
    return jsonify(service=service_json(service), message="Service created successfully"), 201


@admin_bp.patch("/services/<int:service_id>")
@require_roles("ADMIN")
def update_service(service_id: int):
    service = catalog.update_service(service_id, request.get_json(silent=True) or {})
    log_event("SERVICE_UPDATE", user_id=g.user.id, entity="service", entity_id=service.id)
    return jsonify(service=service_json(service), message="Service updated successfully"), 200


# ---------- capacity overrides ----------
@admin_bp.get("/capacity-overrides")
@require_roles("ADMIN")
def list_capacity_overrides():
    rows = overrides.list_overrides(
        date_from=parse_optional_date(request.args.get("override_date_from"), "override_date_from"),
        date_to=parse_optional_date(request.args.get("override_date_to"), "override_date_to"),
        include_inactive=request.args.get("include_inactive") == "true",
    )
    return jsonify(overrides=[override_json(o) for o in rows]), 200


@admin_bp.post("/capacity-overrides")
@require_roles("ADMIN")
def create_capacity_override():
    data = request.get_json(silent=True) or {}
    policy = current_policy()
    is_active = data.get("is_active", True)
    if not isinstance(is_active, bool):
        raise validation_error("is_active must be a boolean")

    row, created = overrides.set_override(
        parse_date(data.get("override_date"), "override_date"),
        parse_time(data.get("time_slot"), policy.time_slots, "time_slot"),
        data.get("capacity"),
        policy,
        is_active=is_active,
    )

    log_event("OVERRIDE_CREATE" if created else "OVERRIDE_UPDATE", user_id=g.user.id,
              entity="capacity_override", entity_id=row.id, metadata={"capacity": row.capacity})
    message = "Capacity override created successfully" if created else "Capacity override updated successfully"
    return jsonify(override=override_json(row), message=message), (201 if created else 200)


@admin_bp.post("/capacity-overrides/block-day")
@require_roles("ADMIN")
def block_day():
    data = request.get_json(silent=True) or {}
    rows = overrides.block_day(parse_date(data.get("date")), current_policy())
    log_event("OVERRIDE_BLOCK_DAY", user_id=g.user.id, entity="capacity_override",
              metadata={"date": data.get("date")})
    return jsonify(overrides=[override_json(o) for o in rows], message="Day blocked"), 200


@admin_bp.patch("/capacity-overrides/<int:override_id>")
@require_roles("ADMIN")
def update_capacity_override(override_id: int):
    data = request.get_json(silent=True) or {}
    policy = current_policy()
    is_active = data.get("is_active")
    if is_active is not None and not isinstance(is_active, bool):
        raise validation_error("is_active must be a boolean")

    row = overrides.update_override(
        override_id,
        policy,
        override_date=parse_optional_date(data.get("override_date"), "override_date"),
        time_slot=parse_time(data["time_slot"], policy.time_slots, "time_slot") if "time_slot" in data else None,
        capacity=data.get("capacity"),
        is_active=is_active,
    )

    log_event("OVERRIDE_UPDATE", user_id=g.user.id, entity="capacity_override", entity_id=row.id)
    return jsonify(override=override_json(row), message="Capacity override updated successfully"), 200


@admin_bp.delete("/capacity-overrides/<int:override_id>")
@require_roles("ADMIN")
def disable_capacity_override(override_id: int):
    row = overrides.disable_override(override_id)
    log_event("OVERRIDE_DISABLE", user_id=g.user.id, entity="capacity_override", entity_id=row.id)
    return jsonify(message="Capacity override disabled successfully"), 200


# ---------- customers ----------
@admin_bp.get("/customers")
@require_roles("ADMIN")
def list_customers():
    rows, total = customers.list_customers(
        customer_type=request.args.get("type"),
        search=request.args.get("search"),
        sort_by=request.args.get("sort_by", "total_bookings"),
        sort_order=request.args.get("sort_order", "desc"),
        limit=request.args.get("limit", 50, type=int),
        offset=request.args.get("offset", 0, type=int),
    )
    return jsonify(customers=rows, total=total), 200


@admin_bp.get("/customers/<customer_id>")
@require_roles("ADMIN")
def customer_detail(customer_id: str):
    return jsonify(customers.get_customer(customer_id)), 200


@admin_bp.get("/customers/<customer_id>/notes")
@require_roles("ADMIN")
def customer_notes(customer_id: str):
    return jsonify(notes=[note_json(n) for n in customers.list_notes(customer_id)]), 200


@admin_bp.post("/customers/<customer_id>/notes")
@require_roles("ADMIN")
def add_customer_note(customer_id: str):
    data = request.get_json(silent=True) or {}
    note = customers.add_note(customer_id, data.get("note_text"), g.user.email)
    log_event("CUSTOMER_NOTE_CREATE", user_id=g.user.id, entity="customer_note", entity_id=note.id)
    return jsonify(note=note_json(note), message="Note added successfully"), 201


@admin_bp.patch("/customers/<customer_id>/notes/<int:note_id>")
@require_roles("ADMIN")
def update_customer_note(customer_id: str, note_id: int):
    data = request.get_json(silent=True) or {}
    note = customers.update_note(customer_id, note_id, data.get("note_text"))
    log_event("CUSTOMER_NOTE_UPDATE", user_id=g.user.id, entity="customer_note", entity_id=note.id)
    return jsonify(note=note_json(note), message="Note updated successfully"), 200


@admin_bp.delete("/customers/<customer_id>/notes/<int:note_id>")
@require_roles("ADMIN")
def delete_customer_note(customer_id: str, note_id: int):
    customers.delete_note(customer_id, note_id)
    log_event("CUSTOMER_NOTE_DELETE", user_id=g.user.id, entity="customer_note", entity_id=note_id)
    return jsonify(message="Note deleted successfully"), 200

# ---------- reporting ----------
@admin_bp.get("/dashboard/stats")
@require_roles("ADMIN")
def stats():
    return jsonify(dashboard_stats(local_now().date())), 200


@admin_bp.get("/reports/bookings")
@require_roles("ADMIN")
def report():
    start_date = request.args.get("start_date")
    end_date = request.args.get("end_date")
    if not start_date or not end_date:
        raise validation_error("start_date and end_date are required")

    result = booking_report(
        parse_date(start_date, "start_date"),
        parse_date(end_date, "end_date"),
        current_policy(),
        service_id=request.args.get("service_id", type=int),
        status=request.args.get("status"),
    )
    return jsonify(result), 200
