"""Capacity resolver.

Effective capacity for a (date, slot) is the day-of-week base capacity,
replaced by an active override for that exact pair when one exists, and forced
to zero for dates in the past or beyond the booking window.
"""
from datetime import date, datetime, timedelta
from typing import Dict, Optional, Tuple

from sqlalchemy import func

from models import db
from models.booking import Booking
from models.capacity_override import CapacityOverride
from scheduling.errors import validation_error
from scheduling.policy import BookingPolicy, local_now

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

SlotKey = Tuple[date, str]


def active_overrides(start: date, end: Optional[date] = None) -> Dict[SlotKey, int]:
    """Map (date, slot) to override capacity for active overrides in [start, end].

    When several active rows target the same pair, the earliest created one wins.
    """
    end = end or start
    rows = (
        CapacityOverride.query
        .filter(
            CapacityOverride.is_active.is_(True),
            CapacityOverride.override_date >= start,
            CapacityOverride.override_date <= end,
        )
        .order_by(CapacityOverride.created_at.asc(), CapacityOverride.id.asc())
        .all()
    )
    out: Dict[SlotKey, int] = {}
    for row in rows:
        out.setdefault((row.override_date, row.time_slot), row.capacity)
    return out


def confirmed_counts(start: date, end: Optional[date] = None) -> Dict[SlotKey, int]:
    end = end or start
    rows = (
        db.session.query(Booking.appointment_date, Booking.appointment_time, func.count(Booking.id))
        .filter(
            Booking.appointment_date >= start,
            Booking.appointment_date <= end,
            Booking.status == "confirmed",
        )
        .group_by(Booking.appointment_date, Booking.appointment_time)
        .all()
    )
    return {(d, t): int(n) for d, t, n in rows}


def confirmed_count(day: date, slot: str) -> int:
    return (
        Booking.query
        .filter_by(appointment_date=day, appointment_time=slot, status="confirmed")
        .count()
    )


def effective_capacity(day: date, slot: str, policy: BookingPolicy, today: date,
                       overrides: Optional[Dict[SlotKey, int]] = None) -> int:
    if policy.is_gated(day, today):
        return 0
    if overrides is None:
        overrides = active_overrides(day)
    return overrides.get((day, slot), policy.base_capacity(day))


def _slot_view(slot: str, capacity: int, booked: int) -> dict:
    available = max(0, capacity - booked)
    if available > 0:
        status = "available"
    elif capacity == 0:
        status = "blocked"
    else:
        status = "full"
    return {
        "time": slot,
        "total_capacity": capacity,
        "booked_count": booked,
        "available_spots": available,
        "is_available": available > 0,
        "status": status,
    }


def _day_view(day: date, policy: BookingPolicy, today: date, overrides, counts) -> dict:
    gated = policy.is_gated(day, today)
    slots = [
        _slot_view(
            slot,
            effective_capacity(day, slot, policy, today, overrides),
            counts.get((day, slot), 0),
        )
        for slot in policy.time_slots
    ]
    fully_overridden_to_zero = all(overrides.get((day, slot)) == 0 for slot in policy.time_slots)
    available = sum(s["available_spots"] for s in slots)
    return {
        "date": day.isoformat(),
        "day_of_week": DAY_NAMES[day.weekday()],
        "base_capacity": policy.base_capacity(day),
        "is_day_blocked": gated or fully_overridden_to_zero,
        "total_capacity": sum(s["total_capacity"] for s in slots),
        "booked_count": sum(s["booked_count"] for s in slots),
        "available_spots": available,
        "is_available": available > 0,
        "slots": slots,
    }


def slot_availability(day: date, slot: str, policy: BookingPolicy, now: Optional[datetime] = None) -> dict:
    today = (now or local_now()).date()
    capacity = effective_capacity(day, slot, policy, today)
    view = _slot_view(slot, capacity, confirmed_count(day, slot))
    view["date"] = day.isoformat()
    return view


def day_availability(day: date, policy: BookingPolicy, now: Optional[datetime] = None) -> dict:
    today = (now or local_now()).date()
    return _day_view(day, policy, today, active_overrides(day), confirmed_counts(day))


def range_availability(start: date, end: date, policy: BookingPolicy, now: Optional[datetime] = None) -> list:
    if end < start:
        raise validation_error("end_date must be on or after start_date")
    span = (end - start).days + 1
    if span > policy.max_range_days:
        raise validation_error(f"Date range cannot exceed {policy.max_range_days} days")

    today = (now or local_now()).date()
    overrides = active_overrides(start, end)
    counts = confirmed_counts(start, end)

    out = []
    for offset in range(span):
        day = start + timedelta(days=offset)
        view = _day_view(day, policy, today, overrides, counts)
        view.pop("slots")
        view["is_blocked"] = view.pop("is_day_blocked")
        out.append(view)
    return out
