"""
app/services/email_service.py

Purpose: Outbound email for login codes

- Sends the one-time code over SMTP
- Blocking smtplib calls run in a worker thread
- Reports failures as a result dict; never raises
- Development fallback logs the code when SMTP is not configured
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Dict, Any

from fastapi import Request

from app.core.config import Settings, settings
from app.core.logging import get_logger, mask_email

logger = get_logger(__name__)

OTP_SUBJECT = "Your OTP for Login"


def build_otp_message(sender: str, to_email: str, otp: str, validity_minutes: int) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = OTP_SUBJECT
    msg["From"] = sender
    msg["To"] = to_email
    msg.set_content(f"Your OTP is {otp}. It will expire in {validity_minutes} minutes.")
    return msg


class EmailService:
    """Service for sending login codes by email"""

    def __init__(self, config: Settings = settings):
        self.config = config
        self.host = config.SMTP_HOST
        self.port = config.SMTP_PORT
        self.username = config.SMTP_USERNAME
        self.password = (config.SMTP_PASSWORD or "").replace(" ", "")
        self.sender = config.email_sender
        self.use_tls = config.SMTP_USE_TLS
        self.timeout = config.SMTP_TIMEOUT

    def is_configured(self) -> bool:
        """Check if SMTP is properly configured"""
        return bool(self.host and self.sender)

    def _send(self, msg: EmailMessage):
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username and self.password:
                smtp.login(self.username, self.password)
            smtp.send_message(msg)

    async def send_otp(self, to_email: str, otp: str) -> Dict[str, Any]:
        """
        Sends a login code.

        Args:
            to_email: Recipient address
            otp: 6-digit code

        Returns:
            {
                "success": True/False,
                "transport": "smtp" | "log",
                "error": "Optional error message"
            }
        """
        masked = mask_email(to_email)

        if not self.is_configured():
            if self.config.is_development:
                logger.warning(
                    f"SMTP not configured, login code for {masked}: {otp}"
                )
                return {"success": True, "transport": "log"}

            logger.error("SMTP not configured")
            return {
                "success": False,
                "transport": "smtp",
                "error": "Email transport not configured"
            }

        msg = build_otp_message(self.sender, to_email, otp, self.config.OTP_EXPIRY_MINUTES)

        try:
            logger.info(f"📤 Sending login code to {masked}")
            await asyncio.to_thread(self._send, msg)
            logger.info(f"✅ Login code sent to {masked}")
            return {"success": True, "transport": "smtp"}

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email: {e}", exc_info=True)
            return {
                "success": False,
                "transport": "smtp",
                "error": str(e)
            }


def get_email_service(request: Request) -> EmailService:
    """FastAPI dependency: the notifier created in the application lifespan."""
    service = getattr(request.app.state, "email_service", None)
    if service is None:
        service = EmailService(settings)
        request.app.state.email_service = service
    return service
