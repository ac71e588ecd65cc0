"""Request-shape validation for booking payloads.

Dates arrive as YYYY-MM-DD strings and times as HH:MM slot labels. Anything
malformed is rejected here, before the booking core runs.
"""
import re
from datetime import date, datetime

from scheduling.errors import validation_error

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}$")
_PHONE_RE = re.compile(r"^\+?[1-9]\d{1,14}$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MAX_PHOTOS = 10
MAX_SPECIAL_REQUEST = 1000


def parse_date(value, field: str = "date") -> date:
    if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        raise validation_error(f"Invalid {field}. Use YYYY-MM-DD")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise validation_error(f"Invalid {field}. Use a real calendar date")


def parse_optional_date(value, field: str = "date"):
    if value in (None, ""):
        return None
    return parse_date(value, field)


def parse_time(value, slots, field: str = "time") -> str:
    if not isinstance(value, str) or not _TIME_RE.match(value.strip()):
        raise validation_error(f"Invalid {field}. Use HH:MM")
    value = value.strip()
    if value not in slots:
        raise validation_error(f"{field} must be one of: {', '.join(slots)}")
    return value


def _required_text(data: dict, field: str, max_len: int = 255) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise validation_error(f"{field} is required")
    value = value.strip()
    if len(value) > max_len:
        raise validation_error(f"{field} must be at most {max_len} characters")
    return value


def _optional_text(data: dict, field: str, max_len: int):
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise validation_error(f"{field} must be a string")
    value = value.strip()
    if len(value) > max_len:
        raise validation_error(f"{field} must be at most {max_len} characters")
    return value or None


def _optional_id(data: dict, field: str):
    value = data.get(field)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise validation_error(f"{field} must be an integer id")
    return value


def _photos(data: dict):
    photos = data.get("inspiration_photos")
    if photos is None:
        return []
    if not isinstance(photos, list) or len(photos) > MAX_PHOTOS:
        raise validation_error(f"inspiration_photos must be a list of at most {MAX_PHOTOS} URLs")
    for url in photos:
        if not isinstance(url, str) or not url.startswith(("http://", "https://")):
            raise validation_error("inspiration_photos must contain http(s) URLs")
    return photos


def booking_input(data: dict, slots, admin: bool = False) -> dict:
    email = _required_text(data, "customer_email").lower()
    if not _EMAIL_RE.match(email):
        raise validation_error("Invalid customer_email")

    phone = _required_text(data, "customer_phone", max_len=20)
    if len(phone) < 10 or not _PHONE_RE.match(phone):
        raise validation_error("Invalid phone number format")

    cleaned = {
        "appointment_date": parse_date(data.get("appointment_date"), "appointment_date"),
        "appointment_time": parse_time(data.get("appointment_time"), slots, "appointment_time"),
        "customer_name": _required_text(data, "customer_name"),
        "customer_email": email,
        "customer_phone": phone,
        "booking_for_name": _optional_text(data, "booking_for_name", 255),
        "service_id": _optional_id(data, "service_id"),
        "special_request": _optional_text(data, "special_request", MAX_SPECIAL_REQUEST),
        "inspiration_photos": _photos(data),
    }
    if admin:
        cleaned["admin_notes"] = _optional_text(data, "admin_notes", 2000)
    return cleaned


def reschedule_input(data: dict, slots) -> dict:
    if not data.get("new_appointment_date") or not data.get("new_appointment_time"):
        raise validation_error("New date and time are required")
    return {
        "new_date": parse_date(data.get("new_appointment_date"), "new_appointment_date"),
        "new_time": parse_time(data.get("new_appointment_time"), slots, "new_appointment_time"),
        "service_id": _optional_id(data, "service_id"),
        "special_request": _optional_text(data, "special_request", MAX_SPECIAL_REQUEST),
    }
