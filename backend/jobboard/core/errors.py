"""
Error taxonomy shared by every engine and route.

Engines raise these; the exception handler installed in ``main`` renders them
as ``{"error": <code>, "detail": <message>}`` with the matching status code.
"""

from fastapi import status


class JobBoardError(Exception):
    """Base class for all client-visible failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"
    default_message: str = "internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message}


class InvalidInput(JobBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_input"
    default_message = "invalid input"


class OtpInvalid(JobBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "otp_invalid"
    default_message = "invalid or expired otp"


class Unauthorized(JobBoardError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"
    default_message = "unauthorized"


class Forbidden(JobBoardError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Admin access required"


class Conflict(JobBoardError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "already exists"


class ServiceUnavailable(JobBoardError):
    # The public contract reports provider outages as 500.
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "service_unavailable"
    default_message = "verification service unavailable"
