"""Admin management of capacity overrides."""
import logging
from datetime import date
from typing import List, Optional

from models import db
from models.capacity_override import CapacityOverride
from scheduling.errors import BookingError, validation_error
from scheduling.policy import BookingPolicy

logger = logging.getLogger(__name__)


def _check_capacity(capacity) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 0:
        raise validation_error("capacity must be a non-negative integer")
    return capacity


def _check_slot(slot: str, policy: BookingPolicy) -> str:
    if slot not in policy.time_slots:
        raise validation_error(f"time_slot must be one of: {', '.join(policy.time_slots)}")
    return slot


def get_override(override_id: int) -> CapacityOverride:
    row = db.session.get(CapacityOverride, override_id)
    if row is None:
        raise BookingError("NOT_FOUND", "Override not found")
    return row


def list_overrides(date_from: Optional[date] = None, date_to: Optional[date] = None,
                   include_inactive: bool = False) -> List[CapacityOverride]:
    q = CapacityOverride.query
    if not include_inactive:
        q = q.filter(CapacityOverride.is_active.is_(True))
    if date_from:
        q = q.filter(CapacityOverride.override_date >= date_from)
    if date_to:
        q = q.filter(CapacityOverride.override_date <= date_to)
    return q.order_by(CapacityOverride.override_date.asc(), CapacityOverride.time_slot.asc()).all()


def _active_for(day: date, slot: str) -> Optional[CapacityOverride]:
    return (
        CapacityOverride.query
        .filter_by(override_date=day, time_slot=slot, is_active=True)
        .order_by(CapacityOverride.created_at.asc(), CapacityOverride.id.asc())
        .first()
    )


def set_override(day: date, slot: str, capacity: int, policy: BookingPolicy,
                 is_active: bool = True, commit: bool = True):
    """Create or update the override for (day, slot).

    An existing active override for the pair is updated in place so only one
    row stays authoritative. Returns (override, created).
    """
    _check_slot(slot, policy)
    _check_capacity(capacity)

    row = _active_for(day, slot)
    created = row is None
    if created:
        row = CapacityOverride(override_date=day, time_slot=slot, capacity=capacity, is_active=is_active)
        db.session.add(row)
    else:
        row.capacity = capacity
        row.is_active = is_active

    if commit:
        db.session.commit()
    return row, created


def block_day(day: date, policy: BookingPolicy) -> List[CapacityOverride]:
    """Block a whole day as one zero-capacity override per slot."""
    rows = [set_override(day, slot, 0, policy, commit=False)[0] for slot in policy.time_slots]
    db.session.commit()
    logger.info("Blocked all slots on %s", day.isoformat())
    return rows


def update_override(override_id: int, policy: BookingPolicy, override_date: Optional[date] = None,
                    time_slot: Optional[str] = None, capacity=None,
                    is_active: Optional[bool] = None) -> CapacityOverride:
    """Edit an override in place.

    Moving or re-activating a row onto a (date, slot) that already has a
    different active override is rejected with OVERRIDE_CONFLICT.
    """
    row = get_override(override_id)
    if override_date is None and time_slot is None and capacity is None and is_active is None:
        raise validation_error("No fields to update")

    day = override_date if override_date is not None else row.override_date
    slot = _check_slot(time_slot, policy) if time_slot is not None else row.time_slot
    active = bool(is_active) if is_active is not None else row.is_active
    if capacity is not None:
        _check_capacity(capacity)

    if active:
        other = (
            CapacityOverride.query
            .filter_by(override_date=day, time_slot=slot, is_active=True)
            .filter(CapacityOverride.id != row.id)
            .first()
        )
        if other is not None:
            raise BookingError(
                "OVERRIDE_CONFLICT",
                f"An active override already exists for {day.isoformat()} {slot}",
            )

    row.override_date = day
    row.time_slot = slot
    row.is_active = active
    if capacity is not None:
        row.capacity = capacity

    db.session.commit()
    return row


def disable_override(override_id: int) -> CapacityOverride:
    row = get_override(override_id)
    row.is_active = False
    db.session.commit()
    return row
