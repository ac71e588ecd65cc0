"""Ticket numbers: TKT-YYYYMMDD-SSS, sequential per appointment date.

The sequence lookup is only a hint. The unique constraint on
``bookings.ticket_number`` decides, and callers retry with a fresh lookup when
an insert collides.
"""
import re
from datetime import date, datetime
from typing import Optional, Tuple

from sqlalchemy import Integer, cast, func

from models import db
from models.booking import Booking

TICKET_PREFIX = "TKT"
SEQUENCE_WIDTH = 3

_TICKET_RE = re.compile(r"^TKT-(\d{8})-(\d{3,})$")


def ticket_prefix(day: date) -> str:
    return f"{TICKET_PREFIX}-{day:%Y%m%d}-"


def format_ticket(day: date, sequence: int) -> str:
    # Padding stops at three digits; 1000 and up print in full.
    return f"{ticket_prefix(day)}{sequence:0{SEQUENCE_WIDTH}d}"


def normalize_ticket(value: str) -> str:
    return (value or "").strip().upper()


def parse_ticket(value: str) -> Optional[Tuple[date, int]]:
    match = _TICKET_RE.match(normalize_ticket(value))
    if not match:
        return None
    try:
        day = datetime.strptime(match.group(1), "%Y%m%d").date()
    except ValueError:
        return None
    return day, int(match.group(2))


def next_sequence(day: date) -> int:
    prefix = ticket_prefix(day)
    suffix = func.substr(Booking.ticket_number, len(prefix) + 1)
    max_seq = (
        db.session.query(func.max(cast(suffix, Integer)))
        .filter(Booking.ticket_number.like(prefix + "%"))
        .scalar()
    )
    return (max_seq or 0) + 1


def allocate_ticket(day: date) -> str:
    return format_ticket(day, next_sequence(day))
