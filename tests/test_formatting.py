from datetime import datetime, timezone

import pytest

from storefront.utils.formatting import (
    calculate_discounted_price,
    estimated_delivery_date,
    format_address,
    format_date,
    format_discount_percentage,
    format_ksh,
    format_phone_number,
    format_relative_time,
    format_time,
    is_valid_phone_number,
    normalize_phone_number,
    slug_to_title,
    status_color,
)
from storefront.utils.validators import check_password, require_fields


@pytest.mark.parametrize(
    "raw",
    ["0722123456", "+254 722 123 456", "254722123456", "722123456", "0722-123-456"],
)
def test_normalize_phone_number_variants(raw):
    assert normalize_phone_number(raw) == "254722123456"


def test_normalize_phone_number_is_idempotent():
    once = normalize_phone_number("0712 345 678")
    assert normalize_phone_number(once) == once


def test_phone_validation():
    assert is_valid_phone_number("0722123456")
    assert not is_valid_phone_number("07221234")
    assert not is_valid_phone_number("")
    assert not is_valid_phone_number(None)


def test_format_phone_number_display():
    assert format_phone_number("254722123456") == "0722 123456"
    assert format_phone_number("12") == "12"


def test_format_ksh():
    assert format_ksh(1500) == "KSh 1,500"
    assert format_ksh(1500.5) == "KSh 1,500.5"
    assert format_ksh(None) == "KSh 0"
    assert format_ksh(float("nan")) == "KSh 0"
    assert format_ksh(2500, include_symbol=False) == "2,500"


def test_discounts():
    assert calculate_discounted_price(2000, 10) == pytest.approx(1800)
    assert calculate_discounted_price(2000, None) == 2000
    assert calculate_discounted_price(2000, 150) == 2000
    assert format_discount_percentage(15) == "15% off"
    assert format_discount_percentage(0) == ""


def test_dates_use_nairobi_time():
    assert format_date("2024-01-15T10:00:00Z") == "15 Jan 24"
    assert format_date("2024-01-15T10:00:00Z", "long") == "Monday, 15 January 2024"
    assert format_time("2024-01-15T10:00:00Z") == "13:00"
    assert format_date("not a date") == "Invalid date"


def test_relative_time():
    now = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
    assert format_relative_time("2024-01-13T12:00:00Z", now=now) == "2d ago"
    assert format_relative_time("2024-01-15T11:59:30Z", now=now) == "30s ago"


def test_estimated_delivery_range():
    today = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)
    assert estimated_delivery_date(2, 3, today=today) == "17 Jan 24 - 18 Jan 24"


def test_text_helpers():
    assert slug_to_title("brake-pads") == "Brake Pads"
    assert format_address("Moi Avenue 12", "Nairobi", "00100") == "Moi Avenue 12, Nairobi, 00100, Kenya"
    assert status_color("PAID") == "#388E3C"
    assert status_color("mystery") == "#757575"


def test_validators():
    errors = require_fields({"name": "  ", "email": "a@b.co"})
    assert errors == {"name": "This field is required"}

    errors = {}
    check_password(errors, "short", "other")
    assert set(errors) == {"password", "password_confirm"}
