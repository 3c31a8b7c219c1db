"""
app/schemas/auth.py

Purpose: Login and session payload schemas

- Fields are optional so missing input is reported as a 400 by the services
- OTP accepted as text or number, normalized to text
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Union, Dict, Any


class LoginRequest(BaseModel):
    email: Optional[str] = Field(None, description="Address the login code is sent to")

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "a@x.com"}}
    )


class VerifyOtpRequest(BaseModel):
    email: Optional[str] = Field(None, description="Address the code was sent to")
    otp: Optional[Union[str, int]] = Field(None, description="6-digit login code")

    @field_validator("otp", mode="before")
    @classmethod
    def normalize_otp(cls, v):
        """Codes are compared as text; numbers from JSON clients are converted."""
        if v is None or isinstance(v, bool):
            return v
        if isinstance(v, int):
            return str(v)
        return v

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "a@x.com", "otp": "123456"}}
    )


class VerifyOtpResponse(BaseModel):
    success: bool = True
    message: str
    token: str
    user: Dict[str, Any]
