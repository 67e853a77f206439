from jobboard.services.analytics import AnalyticsEngine, parse_timestamp
from jobboard.services.container import Services, build_services
from jobboard.services.credentials import CredentialEngine
from jobboard.services.mailer import EmailSender, LoggingEmailSender, ResendEmailSender
from jobboard.services.mobile import MobileVerificationService, to_e164
from jobboard.services.otp import EmailOtpEngine, OtpChallenge
from jobboard.services.sms import (
    TwilioVerifyProvider,
    VerificationCheck,
    VerificationProvider,
    VerificationStart,
)

__all__ = [
    "AnalyticsEngine",
    "parse_timestamp",
    "Services",
    "build_services",
    "CredentialEngine",
    "EmailSender",
    "LoggingEmailSender",
    "ResendEmailSender",
    "MobileVerificationService",
    "to_e164",
    "EmailOtpEngine",
    "OtpChallenge",
    "TwilioVerifyProvider",
    "VerificationCheck",
    "VerificationProvider",
    "VerificationStart",
]
