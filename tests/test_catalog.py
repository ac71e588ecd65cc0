from decimal import Decimal

import pytest

from scheduling.catalog import create_service, list_services, update_service
from scheduling.errors import BookingError


def test_create_and_list(app):
    create_service({"name": "Beard Trim", "description": "Shape up", "price": "15.50", "display_order": 2})
    create_service({"name": "Fade", "description": "Skin fade", "price": 30, "display_order": 1})
    hidden = create_service({"name": "Perm", "description": "Retired", "is_active": False})

    assert [s.name for s in list_services()] == ["Fade", "Beard Trim"]
    assert hidden.id in {s.id for s in list_services(active_only=False)}
    assert list_services(sort_by="price")[0].price == Decimal("15.50")


def test_create_validates(app):
    with pytest.raises(BookingError):
        create_service({"description": "No name"})
    with pytest.raises(BookingError):
        create_service({"name": "Cut", "description": "x", "price": -1})
    with pytest.raises(BookingError):
        create_service({"name": "Cut", "description": "x", "duration": 0})


def test_update(app):
    service = create_service({"name": "Cut", "description": "Classic"})
    updated = update_service(service.id, {"price": "22.00", "is_active": False})
    assert updated.price == Decimal("22.00")
    assert updated.is_active is False

    with pytest.raises(BookingError) as exc:
        update_service(service.id, {"colour": "red"})
    assert exc.value.code == "VALIDATION_ERROR"

    with pytest.raises(BookingError) as exc:
        update_service(404, {"name": "Ghost"})
    assert exc.value.code == "NOT_FOUND"
