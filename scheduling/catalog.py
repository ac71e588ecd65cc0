"""Bookable services (treatments)."""
from decimal import Decimal, InvalidOperation
from typing import List

from models import db
from models.service import Service
from scheduling.errors import BookingError, validation_error

SERVICE_SORT_FIELDS = {
    "name": Service.name,
    "price": Service.price,
    "duration": Service.duration,
    "display_order": Service.display_order,
}

UPDATABLE_FIELDS = ("name", "description", "image_url", "duration", "price", "is_active", "display_order")


def _text(value, field: str, max_len: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise validation_error(f"{field} is required")
    value = value.strip()
    if len(value) > max_len:
        raise validation_error(f"{field} must be at most {max_len} characters")
    return value


def _int(value, field: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise validation_error(f"{field} must be an integer >= {minimum}")
    return value


def _price(value):
    if value is None:
        return None
    if isinstance(value, bool):
        raise validation_error("price must be a non-negative number")
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        raise validation_error("price must be a non-negative number")
    if price < 0:
        raise validation_error("price must be a non-negative number")
    return price


def _clean(field: str, value):
    if field == "name":
        return _text(value, "name", 255)
    if field == "description":
        return _text(value, "description", 2000)
    if field == "image_url":
        return _text(value, "image_url", 500) if value is not None else None
    if field == "duration":
        return _int(value, "duration", 1)
    if field == "price":
        return _price(value)
    if field == "is_active":
        if not isinstance(value, bool):
            raise validation_error("is_active must be a boolean")
        return value
    if field == "display_order":
        return _int(value, "display_order", 0)
    raise validation_error(f"Unknown field {field}")


def list_services(active_only: bool = True, sort_by: str = "display_order") -> List[Service]:
    q = Service.query
    if active_only:
        q = q.filter(Service.is_active.is_(True))
    column = SERVICE_SORT_FIELDS.get(sort_by, Service.display_order)
    return q.order_by(column.asc(), Service.id.asc()).all()


def get_service(service_id: int) -> Service:
    service = db.session.get(Service, service_id)
    if service is None:
        raise BookingError("NOT_FOUND", "Service not found")
    return service


def create_service(data: dict) -> Service:
    service = Service(
        name=_clean("name", data.get("name")),
        description=_clean("description", data.get("description")),
        image_url=_clean("image_url", data.get("image_url")),
        duration=_clean("duration", data.get("duration", 40)),
        price=_clean("price", data.get("price")),
        is_active=_clean("is_active", data.get("is_active", True)),
        display_order=_clean("display_order", data.get("display_order", 0)),
    )
    db.session.add(service)
    db.session.commit()
    return service


def update_service(service_id: int, data: dict) -> Service:
    service = get_service(service_id)
    changes = {f: data[f] for f in UPDATABLE_FIELDS if f in data}
    if not changes:
        raise validation_error("No fields to update")
    for field, value in changes.items():
        setattr(service, field, _clean(field, value))
    db.session.commit()
    return service
