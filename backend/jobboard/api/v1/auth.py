"""
Authentication API endpoints.

Registration (mobile OTP verified), login/logout, the current identity and
the email OTP channel. Tokens are returned in the body and also set as an
HTTP-only cookie.
"""

import re
from typing import Optional

from fastapi import APIRouter, Depends, Response
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field, field_validator

from jobboard.api.deps import get_services, require_authenticated
from jobboard.core.errors import OtpInvalid
from jobboard.core.security import clear_session_cookie, set_session_cookie
from jobboard.models import Identity, UserRecord
from jobboard.models.base import CamelModel
from jobboard.services import Services

router = APIRouter()

EMAIL_PATTERN = r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$"


def _required(value: Optional[str]) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValueError("required")
    return text


# ============== Pydantic Schemas ==============


class RegisterRequest(CamelModel):
    """Schema for user registration. Unknown keys such as ``verificationSid`` are ignored."""

    email: str
    password: str = Field(min_length=1)
    name: str
    mobile: str
    otp: str

    @field_validator("name", "mobile", "otp", mode="before")
    @classmethod
    def not_blank(cls, v):
        return _required(v)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v) -> str:
        """Validate email format."""
        email = _required(v).lower()
        if not re.match(EMAIL_PATTERN, email):
            raise ValueError("Invalid email format")
        return email


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def not_blank(cls, v):
        return _required(v)


class SendOtpRequest(BaseModel):
    mobile: str

    @field_validator("mobile", mode="before")
    @classmethod
    def not_blank(cls, v):
        return _required(v)


class EmailOtpRequest(BaseModel):
    email: str

    @field_validator("email", mode="before")
    @classmethod
    def not_blank(cls, v):
        return _required(v)


class EmailOtpVerifyRequest(EmailOtpRequest):
    code: str

    @field_validator("code", mode="before")
    @classmethod
    def code_not_blank(cls, v):
        return _required(v)


class UserResponse(CamelModel):
    """Schema for user response (without password)."""

    id: int
    email: str
    role: str
    is_admin: bool
    name: Optional[str] = None
    mobile: Optional[str] = None

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            role=user.role,
            is_admin=user.is_admin,
            name=user.name,
            mobile=user.mobile,
        )


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class SendOtpResponse(CamelModel):
    success: bool = True
    verification_id: str
    status: str


# ============== Helper Functions ==============


def _start_session(services: Services, user: UserRecord, response: Response) -> AuthResponse:
    token = services.sessions.issue(Identity(uid=user.id, email=user.email, role=user.role))
    set_session_cookie(response, token, services.settings)
    return AuthResponse(token=token, user=UserResponse.from_record(user))


# ============== API Endpoints ==============


@router.post("/send-otp", response_model=SendOtpResponse)
async def send_otp(payload: SendOtpRequest, services: Services = Depends(get_services)):
    """
    Text a verification code to a mobile number that is not yet registered.

    The code itself is generated and checked by the SMS provider.
    """
    started = await services.mobile.send(payload.mobile)
    return SendOtpResponse(verification_id=started.verification_id, status=started.status)


@router.post("/register", response_model=AuthResponse, response_model_exclude_none=True)
async def register(
    payload: RegisterRequest,
    response: Response,
    services: Services = Depends(get_services),
):
    """
    Register a new user.

    Order matters: uniqueness is checked before the OTP so a duplicate
    account never consumes a valid code.
    """
    mobile = services.mobile.validate(payload.mobile)
    services.credentials.ensure_available(payload.email, mobile)

    await services.mobile.check(mobile, payload.otp)

    user = await run_in_threadpool(
        services.credentials.create_user,
        payload.email,
        payload.password,
        payload.name,
        mobile,
    )
    return _start_session(services, user, response)


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
async def login(
    payload: LoginRequest,
    response: Response,
    services: Services = Depends(get_services),
):
    """
    Login with email and password.

    Unknown email and wrong password get the same 401. Only role=user logins
    are written to the analytics log.
    """
    user = await run_in_threadpool(
        services.credentials.authenticate, payload.email, payload.password
    )
    result = _start_session(services, user, response)

    if user.role == "user":
        services.analytics.record_login(user.id, user.email)

    return result


@router.post("/logout")
async def logout(response: Response, services: Services = Depends(get_services)):
    """
    Clear the session cookie.

    The token itself stays valid until it expires; there is no server-side
    revocation.
    """
    clear_session_cookie(response, services.settings)
    return {"ok": True}


@router.get("/me")
async def get_me(identity: Identity = Depends(require_authenticated)):
    """Decoded token identity, with the role also surfaced as ``isAdmin``."""
    return {
        "user": {
            "uid": identity.uid,
            "email": identity.email,
            "role": identity.role,
            "isAdmin": identity.is_admin,
        }
    }


@router.post("/email-otp")
async def request_email_otp(payload: EmailOtpRequest, services: Services = Depends(get_services)):
    """Email a one-time code. The code is never part of the response."""
    challenge = services.email_otp.create_otp(payload.email)
    await services.email_sender.send_otp(payload.email, challenge.code, challenge.expires_at)
    return {"success": True, "expiresAt": challenge.expires_at.isoformat()}


@router.post("/email-otp/verify")
async def verify_email_otp(
    payload: EmailOtpVerifyRequest,
    services: Services = Depends(get_services),
):
    """Check an emailed code; each code works once."""
    if not services.email_otp.verify_otp(payload.email, payload.code):
        raise OtpInvalid()
    return {"verified": True}
