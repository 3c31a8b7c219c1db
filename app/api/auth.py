"""
app/api/auth.py

Purpose: Passwordless login endpoints

- POST /login: email a one-time code
- POST /verify-otp: exchange the code for a session token
- POST /logout: clear the logged-in display flag
"""

from fastapi import APIRouter, Depends

from app.core.config import Settings, get_settings
from app.core.security import get_current_email
from app.db.mongo import get_users_collection
from app.schemas.auth import LoginRequest, VerifyOtpRequest, VerifyOtpResponse
from app.schemas.response import MessageResponse
from app.services import auth_service
from app.services.email_service import EmailService, get_email_service

router = APIRouter()


@router.post("/login", response_model=MessageResponse)
async def login(
    body: LoginRequest,
    users=Depends(get_users_collection),
    notifier: EmailService = Depends(get_email_service),
    config: Settings = Depends(get_settings),
):
    """
    Sends a login code to the given email, creating the user on first use.
    """
    return await auth_service.issue_otp(users, notifier, config, body.email)


@router.post("/verify-otp", response_model=VerifyOtpResponse)
async def verify_otp(
    body: VerifyOtpRequest,
    users=Depends(get_users_collection),
    config: Settings = Depends(get_settings),
):
    """
    Verifies a login code and returns a session token.
    """
    return await auth_service.verify_otp(users, config, body.email, body.otp)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    email: str = Depends(get_current_email),
    users=Depends(get_users_collection),
):
    return await auth_service.logout(users, email)
