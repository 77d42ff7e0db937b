"""
Input validators, run by services before touching the database.

Request bodies are checked against a fixed field set per operation; anything
else is rejected with ValidationError instead of being written through.
"""

import math
import re

from core.config import MAX_ITEM_PRICE, MAX_QUANTITY
from core.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")


def check_fields(data, allowed, required=()):
    """Reject non-mapping payloads, unknown keys and missing required keys."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be an object")
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ValidationError("Unknown fields", fields=unknown)
    missing = [name for name in required if data.get(name) is None]
    if missing:
        raise ValidationError("Missing required fields", fields=missing)


def validate_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must be a non-empty string")
    return value.strip()


def validate_email(email) -> str:
    email = validate_text(email, "email").lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email address")
    return email


def validate_password(password) -> str:
    if not isinstance(password, str) or len(password) < 6:
        raise ValidationError("Password must be at least 6 characters")
    return password


def validate_price(price) -> float:
    """Price must be a finite number between 0 and MAX_ITEM_PRICE."""
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise ValidationError("Price must be a number")
    if isinstance(price, float) and not math.isfinite(price):
        raise ValidationError("Price must be a finite number")
    if price < 0:
        raise ValidationError("Price must not be negative")
    if price > MAX_ITEM_PRICE:
        raise ValidationError(f"Price must not exceed {MAX_ITEM_PRICE:g}")
    return float(price)


def validate_quantity(qty) -> int:
    """Quantity must be an integer between 1 and MAX_QUANTITY."""
    if isinstance(qty, bool) or not isinstance(qty, int):
        raise ValidationError("Quantity must be an integer")
    if qty < 1:
        raise ValidationError("Quantity must be at least 1")
    if qty > MAX_QUANTITY:
        raise ValidationError(f"Quantity must not exceed {MAX_QUANTITY}", max_quantity=MAX_QUANTITY)
    return qty


def validate_id(value, field: str = "id") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")
    return value
