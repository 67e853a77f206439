"""Email delivery for one-time codes."""

from datetime import datetime

import httpx

from jobboard.core.errors import ServiceUnavailable
from jobboard.core.logger import get_logger

logger = get_logger("otp")

RESEND_URL = "https://api.resend.com/emails"


class EmailSender:
    async def send_otp(self, email: str, code: str, expires_at: datetime) -> None:
        raise NotImplementedError


class LoggingEmailSender(EmailSender):
    """Development fallback: no mail is sent, the code only shows in DEBUG logs."""

    def __init__(self, debug: bool = False):
        self.debug = debug

    async def send_otp(self, email: str, code: str, expires_at: datetime) -> None:
        if self.debug:
            logger.info(f"[dev] OTP for {email}: {code} (expires {expires_at.isoformat()})")
        else:
            logger.warning(f"Email delivery not configured; OTP for {email} was not sent")


class ResendEmailSender(EmailSender):
    def __init__(
        self,
        api_key: str,
        email_from: str,
        app_name: str = "JobBoard",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.email_from = email_from
        self.app_name = app_name
        self.timeout = timeout
        self._transport = transport

    async def send_otp(self, email: str, code: str, expires_at: datetime) -> None:
        html_body = (
            f"<p>Your {self.app_name} verification code is</p>"
            f"<h2 style=\"letter-spacing:4px\">{code}</h2>"
            f"<p>It expires at {expires_at.strftime('%H:%M UTC')} "
            f"and can be used once. If you did not request it, ignore this email.</p>"
        )
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    RESEND_URL,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={
                        "from": f"{self.app_name} <{self.email_from}>",
                        "to": [email],
                        "subject": f"Your {self.app_name} verification code",
                        "html": html_body,
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"Email delivery failed for {email}: {type(e).__name__}")
            raise ServiceUnavailable("email service unreachable") from None

        if response.is_error:
            logger.error(f"Email delivery failed for {email}: HTTP {response.status_code}")
            raise ServiceUnavailable("failed to send otp email")
        logger.info(f"OTP email sent to {email}")
