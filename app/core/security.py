"""
app/core/security.py

Purpose: Session tokens

- Mints signed JWTs carrying the email claim
- Verifies signature and expiry on every protected request
- Bearer header parsing (prefix optional)
- Stateless: never touches the document store
"""

from datetime import datetime
from typing import Optional

import jwt
from fastapi import Depends, Header, Request

from app.core.config import Settings, get_settings
from app.core.exceptions import UnauthorizedError, InvalidTokenError
from app.core.logging import get_logger
from utils.time_utils import utcnow, calculate_token_expiry

logger = get_logger(__name__)

BEARER_SCHEME = "bearer"


def create_session_token(email: str, config: Settings, now: Optional[datetime] = None) -> str:
    """
    Signs a session token for the given email.

    Args:
        email: Verified email address
        config: Settings holding the secret, algorithm and lifetime
        now: Issue time (defaults to current UTC time)

    Returns:
        Encoded JWT
    """
    issued_at = now or utcnow()
    payload = {
        "email": email,
        "iat": issued_at,
        "exp": calculate_token_expiry(issued_at, config.SESSION_TOKEN_EXPIRY_DAYS),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_session_token(token: str, config: Settings) -> str:
    """
    Verifies a session token and returns its email claim.

    Raises:
        InvalidTokenError: Bad signature, expired, or no email claim
    """
    try:
        payload = jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidTokenError("Token expired")
    except jwt.InvalidTokenError:
        raise InvalidTokenError()

    email = payload.get("email")
    if not email or not isinstance(email, str):
        raise InvalidTokenError()
    return email


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extracts the credential from an Authorization header value.

    Both "Bearer <token>" and a bare "<token>" are accepted. A scheme with
    no credential after it counts as no credential.
    """
    if not authorization:
        return None
    parts = authorization.split(None, 1)
    if not parts:
        return None
    if parts[0].lower() == BEARER_SCHEME:
        rest = parts[1].strip() if len(parts) > 1 else ""
        return rest or None
    return authorization.strip() or None


async def get_current_email(
    request: Request,
    authorization: Optional[str] = Header(None),
    config: Settings = Depends(get_settings),
) -> str:
    """
    FastAPI dependency guarding protected routes.

    Stores the verified email on request.state and returns it.
    """
    token = parse_bearer_token(authorization)
    if token is None:
        raise UnauthorizedError()

    try:
        email = decode_session_token(token, config)
    except InvalidTokenError as e:
        logger.info(
            f"Rejected session token: {e.message}",
            extra={"method": request.method, "path": request.url.path}
        )
        raise

    request.state.email = email
    return email
