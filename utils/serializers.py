def _iso(value):
    return value.isoformat() if value else None


def booking_json(b) -> dict:
    return {
        "id": b.id,
        "ticket_number": b.ticket_number,
        "status": b.status,
        "appointment_date": _iso(b.appointment_date),
        "appointment_time": b.appointment_time,
        "slot_duration": b.slot_duration,
        "user_id": b.user_id,
        "service_id": b.service_id,
        "customer_name": b.customer_name,
        "customer_email": b.customer_email,
        "customer_phone": b.customer_phone,
        "booking_for_name": b.booking_for_name,
        "special_request": b.special_request,
        "inspiration_photos": b.inspiration_photos or [],
        "admin_notes": b.admin_notes,
        "original_booking_id": b.original_booking_id,
        "created_at": _iso(b.created_at),
        "updated_at": _iso(b.updated_at),
        "confirmed_at": _iso(b.confirmed_at),
        "completed_at": _iso(b.completed_at),
        "cancelled_at": _iso(b.cancelled_at),
        "cancellation_reason": b.cancellation_reason,
        "cancelled_by": b.cancelled_by,
    }


def service_json(s) -> dict:
    return {
        "id": s.id,
        "name": s.name,
        "description": s.description,
        "image_url": s.image_url,
        "duration": s.duration,
        "price": float(s.price) if s.price is not None else None,
        "is_active": s.is_active,
        "display_order": s.display_order,
    }


def override_json(o) -> dict:
    return {
        "id": o.id,
        "override_date": _iso(o.override_date),
        "time_slot": o.time_slot,
        "capacity": o.capacity,
        "is_active": o.is_active,
        "created_at": _iso(o.created_at),
        "updated_at": _iso(o.updated_at),
    }


def note_json(n) -> dict:
    return {
        "id": n.id,
        "customer_id": n.customer_id,
        "note_text": n.note_text,
        "created_by": n.created_by,
        "created_at": _iso(n.created_at),
        "updated_at": _iso(n.updated_at),
    }
