"""
SMS verification provider.

Mobile codes are generated, delivered and checked by Twilio Verify; this
module only talks to its REST API. Any provider failure is translated into
ServiceUnavailable (or OtpInvalid for an unknown/expired verification) and
never leaks the raw provider error.
"""

from dataclasses import dataclass

import httpx

from jobboard.core.errors import OtpInvalid, ServiceUnavailable
from jobboard.core.logger import get_logger

logger = get_logger("sms")

TWILIO_VERIFY_BASE_URL = "https://verify.twilio.com/v2"

APPROVED = "approved"


@dataclass(frozen=True)
class VerificationStart:
    verification_id: str
    status: str


@dataclass(frozen=True)
class VerificationCheck:
    status: str

    @property
    def approved(self) -> bool:
        return self.status == APPROVED


class VerificationProvider:
    """Capability surface of an external phone verification service."""

    @property
    def configured(self) -> bool:
        return True

    async def start_verification(self, phone_number: str) -> VerificationStart:
        raise NotImplementedError

    async def check_verification(self, phone_number: str, code: str) -> VerificationCheck:
        raise NotImplementedError


class TwilioVerifyProvider(VerificationProvider):
    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        service_sid: str,
        timeout: float = 10.0,
        base_url: str = TWILIO_VERIFY_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.service_sid = service_sid
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self._transport = transport

        if self.configured:
            logger.info("Twilio Verify configured for SMS OTP")
        else:
            logger.warning(
                "Twilio not fully configured; SMS OTP will not work. Set "
                "TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_VERIFY_SERVICE_SID."
            )

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.service_sid)

    async def _post(self, path: str, data: dict) -> httpx.Response:
        if not self.configured:
            raise ServiceUnavailable("otp sms service not configured")

        url = f"{self.base_url}/Services/{self.service_sid}/{path}"
        try:
            async with httpx.AsyncClient(
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                return await client.post(url, data=data)
        except httpx.HTTPError as e:
            logger.error(f"Twilio request to {path} failed: {type(e).__name__}: {e}")
            raise ServiceUnavailable("verification service unreachable") from None

    async def start_verification(self, phone_number: str) -> VerificationStart:
        response = await self._post("Verifications", {"To": phone_number, "Channel": "sms"})
        if response.is_error:
            logger.error(f"Twilio verification create failed: HTTP {response.status_code}")
            raise ServiceUnavailable("failed to send otp sms")

        body = response.json()
        logger.info(
            f"Twilio verification created: {body.get('sid')} for {phone_number}, "
            f"status: {body.get('status')}"
        )
        return VerificationStart(verification_id=body.get("sid", ""), status=body.get("status", ""))

    async def check_verification(self, phone_number: str, code: str) -> VerificationCheck:
        response = await self._post("VerificationCheck", {"To": phone_number, "Code": code})
        if response.status_code == 404:
            # No pending verification: expired, already approved, or never sent.
            raise OtpInvalid()
        if response.is_error:
            logger.error(f"Twilio verification check failed: HTTP {response.status_code}")
            raise ServiceUnavailable("failed to verify otp")

        status = response.json().get("status", "")
        logger.info(f"Twilio verification check for {phone_number}: {status}")
        return VerificationCheck(status=status)
