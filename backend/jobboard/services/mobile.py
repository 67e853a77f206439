"""
Mobile verification.

Normalizes phone input, enforces mobile uniqueness and delegates code
delivery/checking to a VerificationProvider.
"""

from jobboard.core.errors import Conflict, InvalidInput, OtpInvalid, ServiceUnavailable
from jobboard.core.logger import get_logger
from jobboard.db.repositories import UserRepository
from jobboard.models import normalize_mobile
from jobboard.services.sms import VerificationProvider, VerificationStart

logger = get_logger("sms")

LOCAL_NUMBER_DIGITS = 10


def to_e164(mobile: str, default_country_code: str = "+91") -> str:
    """
    Convert a normalized number to E.164.

    Numbers with a leading '+' are kept; bare 10-digit local numbers get the
    default country code.

    Raises:
        InvalidInput: if there is no country code and the number is not local
    """
    normalized = normalize_mobile(mobile)
    if normalized.startswith("+"):
        return normalized
    if len(normalized) == LOCAL_NUMBER_DIGITS:
        return f"{default_country_code}{normalized}"
    raise InvalidInput(
        f"mobile number must include country code (e.g., {default_country_code}XXXXXXXXXX)"
    )


class MobileVerificationService:
    def __init__(
        self,
        users: UserRepository,
        provider: VerificationProvider,
        min_digits: int = 10,
        default_country_code: str = "+91",
    ):
        self.users = users
        self.provider = provider
        self.min_digits = min_digits
        self.default_country_code = default_country_code

    def validate(self, mobile: str) -> str:
        """
        Normalize and check the digit count.

        Returns:
            The normalized number (digits with an optional leading '+')
        """
        normalized = normalize_mobile(mobile)
        digit_count = len(normalized.lstrip("+"))
        if digit_count < self.min_digits:
            logger.info(f"Mobile validation failed - digit count: {digit_count}")
            raise InvalidInput("valid mobile number required")
        return normalized

    def ensure_unused(self, mobile: str) -> None:
        if self.users.get_by_mobile(mobile):
            raise Conflict("mobile number already exists")

    async def send(self, mobile: str) -> VerificationStart:
        """Validate, check uniqueness, then ask the provider to text a code."""
        normalized = self.validate(mobile)
        self.ensure_unused(normalized)

        if not self.provider.configured:
            logger.warning("Attempted to send OTP but the SMS provider is not configured")
            raise ServiceUnavailable("otp sms service not configured")

        phone_number = to_e164(normalized, self.default_country_code)
        logger.info(f"Sending SMS OTP to {phone_number}")
        return await self.provider.start_verification(phone_number)

    async def check(self, mobile: str, code: str) -> None:
        """
        Confirm a code with the provider.

        Raises:
            OtpInvalid: unless the provider reports 'approved'
            ServiceUnavailable: if the provider is missing or unreachable
        """
        if not self.provider.configured:
            raise ServiceUnavailable("otp verification service not configured")

        phone_number = to_e164(mobile, self.default_country_code)
        result = await self.provider.check_verification(phone_number, str(code).strip())
        if not result.approved:
            raise OtpInvalid()
