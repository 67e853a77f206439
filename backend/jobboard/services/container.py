"""
Service wiring.

One Services container is built per application and hung on
``app.state.services``; nothing stateful lives at module level, so tests can
build as many isolated apps as they like.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from jobboard.core.config import DEFAULT_JWT_SECRET, Settings
from jobboard.core.logger import get_logger
from jobboard.core.security import SessionEngine, build_password_context
from jobboard.db.repositories import AnalyticsRepository, UserRepository
from jobboard.db.store import RecordStore, build_store
from jobboard.services.analytics import AnalyticsEngine, utc_now
from jobboard.services.credentials import CredentialEngine
from jobboard.services.mailer import EmailSender, LoggingEmailSender, ResendEmailSender
from jobboard.services.mobile import MobileVerificationService
from jobboard.services.otp import EmailOtpEngine
from jobboard.services.sms import TwilioVerifyProvider, VerificationProvider

logger = get_logger("auth")


@dataclass
class Services:
    settings: Settings
    store: RecordStore
    users: UserRepository
    events: AnalyticsRepository
    credentials: CredentialEngine
    sessions: SessionEngine
    email_otp: EmailOtpEngine
    email_sender: EmailSender
    mobile: MobileVerificationService
    analytics: AnalyticsEngine


def build_services(
    settings: Settings,
    *,
    store: Optional[RecordStore] = None,
    sms_provider: Optional[VerificationProvider] = None,
    email_sender: Optional[EmailSender] = None,
    clock: Callable[[], datetime] = utc_now,
) -> Services:
    """Construct every engine from settings; any collaborator can be injected."""
    if settings.JWT_SECRET == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is not set - using the development default")

    store = store or build_store(
        settings.STORE_BACKEND,
        database_url=settings.DATABASE_URL,
        data_dir=settings.DATA_DIR,
    )
    users = UserRepository(store)
    events = AnalyticsRepository(store)

    if sms_provider is None:
        sms_provider = TwilioVerifyProvider(
            account_sid=settings.TWILIO_ACCOUNT_SID,
            auth_token=settings.TWILIO_AUTH_TOKEN,
            service_sid=settings.TWILIO_VERIFY_SERVICE_SID,
            timeout=settings.SMS_TIMEOUT_SECONDS,
        )

    if email_sender is None:
        if settings.RESEND_API_KEY:
            email_sender = ResendEmailSender(
                settings.RESEND_API_KEY, settings.EMAIL_FROM, app_name=settings.APP_NAME
            )
        else:
            email_sender = LoggingEmailSender(debug=settings.DEBUG)

    return Services(
        settings=settings,
        store=store,
        users=users,
        events=events,
        credentials=CredentialEngine(users, build_password_context(settings.BCRYPT_ROUNDS)),
        sessions=SessionEngine(
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            ttl=timedelta(days=settings.SESSION_TTL_DAYS),
        ),
        email_otp=EmailOtpEngine(
            clock=clock,
            ttl=timedelta(minutes=settings.OTP_TTL_MINUTES),
            max_attempts=settings.OTP_MAX_ATTEMPTS,
        ),
        email_sender=email_sender,
        mobile=MobileVerificationService(
            users,
            sms_provider,
            min_digits=settings.MOBILE_MIN_DIGITS,
            default_country_code=settings.DEFAULT_COUNTRY_CODE,
        ),
        analytics=AnalyticsEngine(
            events,
            users,
            clock=clock,
            recent_days=settings.ANALYTICS_RECENT_DAYS,
            history_limit=settings.ANALYTICS_HISTORY_LIMIT,
        ),
    )
