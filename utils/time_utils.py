"""
utils/time_utils.py

Purpose: Time and expiry helpers

- OTP expiry calculation and checks
- Session token expiry
"""

from datetime import datetime, timedelta
from typing import Optional


def utcnow() -> datetime:
    """
    Naive UTC timestamp, matching what the document store hands back.
    """
    return datetime.utcnow()


def calculate_otp_expiry(otp_time: datetime, validity_minutes: int = 5) -> datetime:
    """
    Calculates OTP expiry timestamp.
    """
    return otp_time + timedelta(minutes=validity_minutes)


def is_otp_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Checks if an OTP has expired.

    Records without an expiry timestamp are treated as expired.
    """
    if not expires_at:
        return True
    if expires_at.tzinfo is not None:
        expires_at = expires_at.replace(tzinfo=None) - (expires_at.utcoffset() or timedelta(0))
    return (now or utcnow()) >= expires_at


def calculate_token_expiry(issued_at: datetime, validity_days: int = 7) -> datetime:
    """
    Calculates session token expiry timestamp.
    """
    return issued_at + timedelta(days=validity_days)
