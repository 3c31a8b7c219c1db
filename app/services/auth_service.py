"""
app/services/auth_service.py

Purpose: Passwordless login lifecycle

- Issues 6-digit login codes and stores them on the user record
- Verifies codes (single use, server-side expiry) and mints session tokens
- Logout clears the display-only isLoggedIn flag
"""

import secrets
from typing import Any, Dict, Optional

from pymongo import ReturnDocument

from app.core.config import Settings
from app.core.exceptions import (
    ValidationError,
    InvalidCredentialsError,
    NotificationDeliveryError,
)
from app.core.logging import get_logger, LogContext, mask_email
from app.core.security import create_session_token
from app.models.user import new_user_fields, sanitize_user
from app.services.email_service import EmailService
from utils.time_utils import utcnow, calculate_otp_expiry, is_otp_expired
from utils.validation_utils import normalize_email, validate_email, normalize_otp, validate_otp_format

logger = get_logger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999


def generate_otp() -> str:
    """
    Uniform 6-digit code in [100000, 999999], as text.
    """
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def require_email(email: Optional[str]) -> str:
    normalized = normalize_email(email)
    if not normalized:
        raise ValidationError("Email is required")
    if not validate_email(normalized):
        raise ValidationError("Invalid email")
    return normalized


async def issue_otp(users, notifier: EmailService, config: Settings, email: Optional[str]) -> Dict[str, Any]:
    """
    Generates and stores a login code, then emails it.

    Args:
        users: Users collection
        notifier: Email sender
        config: Settings (code lifetime)
        email: Address from the request

    Returns:
        Acknowledgment without the code

    Raises:
        ValidationError: Missing or malformed email
        NotificationDeliveryError: Code stored but the email could not be sent
    """
    email = require_email(email)
    masked = mask_email(email)

    with LogContext(email=masked):
        otp = generate_otp()
        now = utcnow()
        expires_at = calculate_otp_expiry(now, config.OTP_EXPIRY_MINUTES)

        # One upsert: new records get an empty cart, existing ones keep theirs
        result = await users.update_one(
            {"email": email},
            {
                "$set": {
                    "otp": otp,
                    "otp_expires_at": expires_at,
                    "isLoggedIn": False,
                },
                "$setOnInsert": new_user_fields(now),
            },
            upsert=True,
        )

        if result.upserted_id is not None:
            logger.info("Created new user")

        delivery = await notifier.send_otp(email, otp)
        if not delivery.get("success"):
            logger.error(f"Login code stored but not delivered: {delivery.get('error')}")
            raise NotificationDeliveryError(details={"reason": delivery.get("error")})

        logger.info("Login code issued")
        return {"success": True, "message": "OTP sent successfully"}


async def verify_otp(users, config: Settings, email: Optional[str], otp: Any) -> Dict[str, Any]:
    """
    Exchanges a login code for a session token.

    Returns:
        {"success", "message", "token", "user"} with the user sanitized

    Raises:
        ValidationError: Missing email or code
        InvalidCredentialsError: Unknown email, no pending code, expired code or mismatch
    """
    email = normalize_email(email)
    code = normalize_otp(otp)
    if not email or not code:
        raise ValidationError("Email and OTP are required")

    masked = mask_email(email)

    with LogContext(email=masked):
        user = await users.find_one({"email": email})
        if not user:
            logger.info("Verification for unknown email")
            raise InvalidCredentialsError()

        stored = normalize_otp(user.get("otp"))
        if not stored or not code.isascii() or not validate_otp_format(code) or not secrets.compare_digest(stored, code):
            logger.info("Login code mismatch")
            raise InvalidCredentialsError()

        if is_otp_expired(user.get("otp_expires_at")):
            logger.info("Login code expired")
            raise InvalidCredentialsError("OTP expired")

        # Conditional on the exact stored code, so a concurrent replay loses
        updated = await users.find_one_and_update(
            {"email": email, "otp": user.get("otp")},
            {
                "$set": {
                    "otp": None,
                    "otp_expires_at": None,
                    "isLoggedIn": True,
                    "last_login_at": utcnow(),
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            logger.warning("Login code consumed concurrently")
            raise InvalidCredentialsError()

        token = create_session_token(email, config)
        logger.info("User logged in")

        return {
            "success": True,
            "message": "Login successful",
            "token": token,
            "user": sanitize_user(updated),
        }


async def logout(users, email: str) -> Dict[str, Any]:
    """
    Marks the user as logged out. The token itself stays valid until expiry.
    """
    masked = mask_email(email)
    result = await users.update_one(
        {"email": email},
        {"$set": {"isLoggedIn": False}}
    )
    if result.matched_count == 0:
        logger.warning("Logout for unknown user", extra={"email": masked})
    else:
        logger.info("User logged out", extra={"email": masked})

    return {"success": True, "message": "Logged out successfully"}
