"""Admin reporting over bookings in a date range."""
from collections import OrderedDict
from datetime import date, timedelta
from typing import Optional

from models.booking import Booking
from models.service import Service
from scheduling.capacity import DAY_NAMES
from scheduling.errors import validation_error
from scheduling.policy import BookingPolicy


def booking_report(start: date, end: date, policy: BookingPolicy,
                   service_id: Optional[int] = None, status: Optional[str] = None) -> dict:
    if end < start:
        raise validation_error("end_date must be on or after start_date")
    if (end - start).days + 1 > policy.max_report_days:
        raise validation_error(f"Report range cannot exceed {policy.max_report_days} days")

    q = (
        Booking.query
        .outerjoin(Service, Booking.service_id == Service.id)
        .filter(Booking.appointment_date >= start, Booking.appointment_date <= end)
    )
    if service_id is not None:
        q = q.filter(Booking.service_id == service_id)
    if status:
        q = q.filter(Booking.status == status)
    bookings = q.all()

    completed = [b for b in bookings if b.status == "completed"]
    cancelled = sum(1 for b in bookings if b.status == "cancelled")

    total_revenue = None
    if completed:
        total_revenue = float(sum((b.service.price or 0) for b in completed if b.service))

    settled = len(completed) + cancelled
    completion_rate = round(len(completed) / settled * 100, 1) if settled else 0.0

    by_service = OrderedDict()
    for b in bookings:
        name = b.service.name if b.service else "No Service"
        by_service.setdefault(name, {"service_name": name, "count": 0})["count"] += 1

    by_day = OrderedDict((name, {"day": name, "count": 0}) for name in DAY_NAMES)
    for b in bookings:
        by_day[DAY_NAMES[b.appointment_date.weekday()]]["count"] += 1

    # Capacity per slot summed over every day in the range, before overrides.
    days = [start + timedelta(days=i) for i in range((end - start).days + 1)]
    slot_capacity = sum(policy.base_capacity(d) for d in days)
    by_slot = OrderedDict(
        (slot, {"time": slot, "count": 0, "total_capacity": slot_capacity})
        for slot in policy.time_slots
    )
    for b in bookings:
        if b.appointment_time in by_slot:
            by_slot[b.appointment_time]["count"] += 1

    return {
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "total_bookings": len(bookings),
        "confirmed": sum(1 for b in bookings if b.status == "confirmed"),
        "completed": len(completed),
        "cancelled": cancelled,
        "completion_rate": completion_rate,
        "total_revenue": total_revenue,
        "by_service": list(by_service.values()),
        "by_day_of_week": [d for d in by_day.values() if d["count"] > 0],
        "by_time_slot": list(by_slot.values()),
    }


def dashboard_stats(today: date) -> dict:
    week_start = today - timedelta(days=today.weekday())
    week_end = week_start + timedelta(days=6)

    todays = Booking.query.filter(Booking.appointment_date == today).all()
    week = Booking.query.filter(
        Booking.appointment_date >= week_start,
        Booking.appointment_date <= week_end,
    ).all()

    return {
        "today_bookings": len(todays),
        "today_completed": sum(1 for b in todays if b.status == "completed"),
        "today_upcoming": sum(1 for b in todays if b.status == "confirmed"),
        "week_bookings": len(week),
        "week_cancelled": sum(1 for b in week if b.status == "cancelled"),
    }
