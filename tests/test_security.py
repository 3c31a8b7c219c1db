"""
Tests for session tokens
"""

from datetime import timedelta

import jwt
import pytest

from app.core.exceptions import InvalidTokenError
from app.core.security import create_session_token, decode_session_token, parse_bearer_token
from utils.time_utils import utcnow


def test_round_trip_returns_email(test_settings):
    token = create_session_token("a@x.com", test_settings)

    assert decode_session_token(token, test_settings) == "a@x.com"


def test_expired_token_rejected(test_settings):
    issued = utcnow() - timedelta(days=test_settings.SESSION_TOKEN_EXPIRY_DAYS, seconds=5)
    token = create_session_token("a@x.com", test_settings, now=issued)

    with pytest.raises(InvalidTokenError) as exc_info:
        decode_session_token(token, test_settings)
    assert exc_info.value.message == "Token expired"


def test_wrong_secret_rejected(test_settings):
    token = create_session_token("a@x.com", test_settings)
    other = test_settings.model_copy(update={"JWT_SECRET": "another-secret"})

    with pytest.raises(InvalidTokenError):
        decode_session_token(token, other)


def test_token_without_email_rejected(test_settings):
    token = jwt.encode(
        {"sub": "a@x.com", "exp": utcnow() + timedelta(hours=1)},
        test_settings.JWT_SECRET,
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        decode_session_token(token, test_settings)


def test_token_without_expiry_rejected(test_settings):
    token = jwt.encode({"email": "a@x.com"}, test_settings.JWT_SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        decode_session_token(token, test_settings)


@pytest.mark.parametrize("header,expected", [
    (None, None),
    ("", None),
    ("   ", None),
    ("Bearer ", None),
    ("Bearer", None),
    ("bearer   ", None),
    ("abc.def.ghi", "abc.def.ghi"),
    ("Bearer abc.def.ghi", "abc.def.ghi"),
    ("bearer abc.def.ghi", "abc.def.ghi"),
    ("  Bearer   abc.def.ghi ", "abc.def.ghi"),
])
def test_parse_bearer_token(header, expected):
    assert parse_bearer_token(header) == expected
