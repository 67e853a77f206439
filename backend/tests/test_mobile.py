"""Tests for phone normalization, mobile verification and the Twilio client."""
import httpx
import pytest

from jobboard.core.errors import Conflict, InvalidInput, OtpInvalid, ServiceUnavailable
from jobboard.models import normalize_mobile
from jobboard.services import MobileVerificationService, TwilioVerifyProvider, to_e164


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("+91 98765-43210", "+919876543210"),
        ("(987) 654 3210", "9876543210"),
        ("  +1.415.555.0100 ", "+14155550100"),
        ("98+765", "98765"),
        ("٩٨٧٦٥٤٣٢١٠", ""),
        ("+٩١ 98765 43210", "+9876543210"),
        ("98765²43210", "9876543210"),
        ("９８７６５４３２１０", ""),
        ("", ""),
    ],
)
def test_normalize_mobile(raw: str, expected: str) -> None:
    assert normalize_mobile(raw) == expected


def test_to_e164() -> None:
    assert to_e164("9876543210") == "+919876543210"
    assert to_e164("9876543210", "+44") == "+449876543210"
    assert to_e164("+14155550100") == "+14155550100"
    with pytest.raises(InvalidInput, match="country code"):
        to_e164("919876543210")


@pytest.fixture
def mobile(users, sms_provider) -> MobileVerificationService:
    return MobileVerificationService(users, sms_provider)


@pytest.mark.asyncio
async def test_send_starts_provider_verification(mobile, sms_provider) -> None:
    started = await mobile.send("98765 43210")
    assert started.status == "pending"
    assert sms_provider.started == ["+919876543210"]


@pytest.mark.asyncio
async def test_send_rejects_short_numbers(mobile, sms_provider) -> None:
    with pytest.raises(InvalidInput):
        await mobile.send("12345")
    assert sms_provider.started == []


@pytest.mark.asyncio
async def test_send_rejects_registered_numbers(mobile, users, sms_provider) -> None:
    users.create("a@x.io", "hash", mobile="+919876543210")
    with pytest.raises(Conflict):
        await mobile.send("+91 98765 43210")
    assert sms_provider.started == []


@pytest.mark.asyncio
async def test_unconfigured_provider_is_unavailable(users) -> None:
    service = MobileVerificationService(users, TwilioVerifyProvider("", "", ""))
    with pytest.raises(ServiceUnavailable):
        await service.send("9876543210")
    with pytest.raises(ServiceUnavailable):
        await service.check("9876543210", "123456")


@pytest.mark.asyncio
async def test_check_requires_approved_status(mobile) -> None:
    await mobile.check("9876543210", "123456")
    with pytest.raises(OtpInvalid):
        await mobile.check("9876543210", "000000")


# ============== Twilio Verify client ==============


def _twilio(handler) -> TwilioVerifyProvider:
    return TwilioVerifyProvider(
        "AC123", "token", "VA456", transport=httpx.MockTransport(handler)
    )


@pytest.mark.asyncio
async def test_twilio_start_verification() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.content.decode()
        seen["auth"] = request.headers.get("authorization", "")
        return httpx.Response(201, json={"sid": "VE789", "status": "pending"})

    started = await _twilio(handler).start_verification("+919876543210")

    assert started.verification_id == "VE789"
    assert started.status == "pending"
    assert seen["url"] == "https://verify.twilio.com/v2/Services/VA456/Verifications"
    assert "To=%2B919876543210" in seen["body"] and "Channel=sms" in seen["body"]
    assert seen["auth"].startswith("Basic ")


@pytest.mark.asyncio
async def test_twilio_check_statuses() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        code = dict(httpx.QueryParams(request.content.decode()))["Code"]
        status = "approved" if code == "111111" else "pending"
        return httpx.Response(200, json={"status": status})

    provider = _twilio(handler)
    assert (await provider.check_verification("+919876543210", "111111")).approved
    assert not (await provider.check_verification("+919876543210", "222222")).approved


@pytest.mark.asyncio
async def test_twilio_missing_verification_is_otp_invalid() -> None:
    provider = _twilio(lambda request: httpx.Response(404, json={"code": 20404}))
    with pytest.raises(OtpInvalid):
        await provider.check_verification("+919876543210", "111111")


@pytest.mark.asyncio
async def test_twilio_failures_become_service_unavailable() -> None:
    def timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(ServiceUnavailable):
        await _twilio(timeout).start_verification("+919876543210")

    server_error = _twilio(lambda request: httpx.Response(503))
    with pytest.raises(ServiceUnavailable):
        await server_error.start_verification("+919876543210")
    with pytest.raises(ServiceUnavailable):
        await server_error.check_verification("+919876543210", "111111")


def test_validate_rejects_non_ascii_digits(mobile) -> None:
    with pytest.raises(InvalidInput):
        mobile.validate("٩٨٧٦٥٤٣٢١٠")
