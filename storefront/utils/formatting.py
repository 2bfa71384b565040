"""
Currency, phone, date and text helpers for the Kenyan storefront.

All functions are pure: no settings, no I/O.
"""
import math
import re
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from storefront.constants import (
    DEFAULT_STATUS_COLOR,
    ORDER_STATUS,
    PAYMENT_STATUS,
    PHONE_PREFIX,
    TIMEZONE,
)

NAIROBI = ZoneInfo(TIMEZONE)

_NON_DIGITS = re.compile(r"\D")
_MSISDN = re.compile(r"^254[0-9]{9}$")


# ---------------- currency ----------------

def format_ksh(amount: float | int | None, include_symbol: bool = True) -> str:
    """
    Format an amount in Kenyan shillings: 0 to 2 fraction digits,
    thousands separated. format_ksh(1500) -> "KSh 1,500".
    """
    if amount is None or not math.isfinite(amount):
        return "KSh 0" if include_symbol else "0"

    sign = "-" if amount < 0 else ""
    digits = f"{abs(round(amount, 2)):,.2f}".rstrip("0").rstrip(".")
    if not include_symbol:
        return f"{sign}{digits}"
    return f"{sign}KSh {digits}"


def calculate_discounted_price(price: float, discount_percent: float | None) -> float:
    if not discount_percent or discount_percent <= 0 or discount_percent > 100:
        return price
    return price * (1 - discount_percent / 100)


def format_discount_percentage(discount: float | None) -> str:
    if not discount or discount <= 0:
        return ""
    return f"{discount:g}% off"


# ---------------- phone numbers ----------------

def normalize_phone_number(phone: str) -> str:
    """
    Normalize a Kenyan number to MSISDN form (254XXXXXXXXX).

    "0722123456", "+254 722 123 456" and "722123456" all become
    "254722123456". Already-normalized input is returned unchanged.
    """
    cleaned = _NON_DIGITS.sub("", phone or "")
    if cleaned.startswith("0"):
        cleaned = PHONE_PREFIX + cleaned[1:]
    if not cleaned.startswith(PHONE_PREFIX):
        cleaned = PHONE_PREFIX + cleaned
    return cleaned


def is_valid_phone_number(phone: str | None) -> bool:
    if not phone:
        return False
    return bool(_MSISDN.match(normalize_phone_number(phone)))


def format_phone_number(phone: str) -> str:
    """Display form "0722 123456"; input that doesn't fit is returned as-is."""
    cleaned = _NON_DIGITS.sub("", phone or "")
    if cleaned.startswith(PHONE_PREFIX):
        cleaned = "0" + cleaned[len(PHONE_PREFIX):]
    if len(cleaned) == 10 and cleaned.startswith("0"):
        return f"{cleaned[:4]} {cleaned[4:]}"
    return phone


# ---------------- dates ----------------

def _to_nairobi(value: str | datetime | date | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(NAIROBI)
    return datetime(value.year, value.month, value.day, tzinfo=NAIROBI)


def format_date(value: str | datetime | date | None, fmt: str = "short") -> str:
    """
    short: "15 Jan 24"
    long:  "Monday, 15 January 2024"
    """
    dt = _to_nairobi(value)
    if dt is None:
        return "Invalid date"
    if fmt == "short":
        return f"{dt.day} {dt:%b %y}"
    return f"{dt:%A}, {dt.day} {dt:%B %Y}"


def format_time(value: str | datetime | None) -> str:
    dt = _to_nairobi(value)
    if dt is None:
        return "Invalid time"
    return f"{dt:%H:%M}"


def format_relative_time(value: str | datetime, now: datetime | None = None) -> str:
    """Compact "2d ago" style age of a timestamp."""
    dt = _to_nairobi(value)
    if dt is None:
        return "Invalid date"
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    seconds = math.floor((now - dt).total_seconds())

    for span, suffix in (
        (31536000, "y"),
        (2592000, "mo"),
        (86400, "d"),
        (3600, "h"),
        (60, "m"),
    ):
        interval = seconds / span
        if interval > 1:
            return f"{math.floor(interval)}{suffix} ago"
    return f"{seconds}s ago"


def estimated_delivery_date(min_days: int, max_days: int, today: datetime | None = None) -> str:
    today = today or datetime.now(timezone.utc)
    min_date = today + timedelta(days=min_days)
    if min_days == max_days:
        return format_date(min_date)
    max_date = today + timedelta(days=max_days)
    return f"{format_date(min_date)} - {format_date(max_date)}"


# ---------------- text ----------------

def slug_to_title(slug: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def format_address(street: str, city: str, postal_code: str, country: str = "Kenya") -> str:
    return ", ".join(part for part in (street, city, postal_code, country) if part)


def status_color(status: str) -> str:
    """Colour for an order or payment status badge."""
    key = status.lower()
    info = ORDER_STATUS.get(key) or PAYMENT_STATUS.get(key)
    return info["color"] if info else DEFAULT_STATUS_COLOR
