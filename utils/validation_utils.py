"""
utils/validation_utils.py

Purpose: Input validation

- Email normalization and format check
- OTP normalization and format check
- Cart quantity and product identifier checks
"""

import re
from typing import Any, Optional


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_EMAIL_LENGTH = 320

MAX_QUANTITY = 10000
QUANTITY_PATTERN = re.compile(r"^\s*[0-9]{1,9}\s*$")

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def normalize_email(email: Optional[str]) -> str:
    """
    Strips and lowercases an email address.

    Args:
        email: Raw email from the request body

    Returns:
        Normalized email, or "" when nothing usable was supplied
    """
    if not email or not isinstance(email, str):
        return ""
    return email.strip().lower()


def validate_email(email: str) -> bool:
    """
    Validates email format.

    Args:
        email: Normalized email string

    Returns:
        True if it looks like an address
    """
    if not email or len(email) > MAX_EMAIL_LENGTH:
        return False

    return bool(EMAIL_PATTERN.match(email))


def normalize_otp(otp: Any) -> str:
    """
    Converts a submitted code to its canonical text form.

    Args:
        otp: Code as received (text or number)

    Returns:
        Stripped string, "" when missing
    """
    if otp is None or isinstance(otp, bool):
        return ""
    return str(otp).strip()


def validate_otp_format(otp: str) -> bool:
    """
    Validates OTP format (must be 6 digits).

    Args:
        otp: OTP string

    Returns:
        True if valid 6-digit OTP
    """
    if not otp:
        return False

    return bool(re.match(r"^\d{6}$", otp.strip()))


def fits_int64(value: int) -> bool:
    """BSON stores integers in at most 8 bytes."""
    return INT64_MIN <= value <= INT64_MAX


def parse_quantity(quantity: Any) -> Optional[int]:
    """
    Parses a requested cart quantity.

    Accepts integers and integral numeric strings; booleans, floats with a
    fractional part and anything outside 1..MAX_QUANTITY are rejected.

    Returns:
        The quantity, or None if it is not acceptable
    """
    if quantity is None or isinstance(quantity, bool):
        return None

    if isinstance(quantity, float):
        if not quantity.is_integer():
            return None
        quantity = int(quantity)
    elif isinstance(quantity, str):
        if not QUANTITY_PATTERN.match(quantity):
            return None
        quantity = int(quantity)
    elif not isinstance(quantity, int):
        return None

    if quantity < 1 or quantity > MAX_QUANTITY:
        return None

    return quantity


def validate_product_id(product_id: Any) -> bool:
    """
    A product identifier must be a non-empty string or an integer that fits
    in 64 bits. Booleans, floats, lists and mappings are rejected.
    """
    if isinstance(product_id, bool):
        return False
    if isinstance(product_id, int):
        return fits_int64(product_id)
    if isinstance(product_id, str):
        return bool(product_id.strip())
    return False
