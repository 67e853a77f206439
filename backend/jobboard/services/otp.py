"""
Email OTP Engine.

Six-digit, single-use codes kept in process memory, keyed by normalized
email. One pending code per email; a new request replaces the old one.
"""

import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jobboard.core.errors import InvalidInput
from jobboard.core.logger import get_logger
from jobboard.models import normalize_email

logger = get_logger("otp")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OtpChallenge:
    code: str
    expires_at: datetime


@dataclass
class _PendingOtp:
    code: str
    expires_at: datetime
    attempts: int = 0


class EmailOtpEngine:
    def __init__(
        self,
        clock: Clock = utc_now,
        ttl: timedelta = timedelta(minutes=5),
        max_attempts: int = 5,
        rng: Optional[Callable[[], int]] = None,
    ):
        self.clock = clock
        self.ttl = ttl
        self.max_attempts = max_attempts
        self._rng = rng or (lambda: 100000 + secrets.randbelow(900000))
        self._pending: dict[str, _PendingOtp] = {}
        self._lock = threading.Lock()

    def create_otp(self, email: str) -> OtpChallenge:
        """
        Issue a fresh code for an email, replacing any pending one.

        Raises:
            InvalidInput: if the email is empty
        """
        key = normalize_email(email)
        if not key:
            raise InvalidInput("email required")

        code = f"{self._rng():06d}"
        expires_at = self.clock() + self.ttl
        with self._lock:
            self._pending[key] = _PendingOtp(code=code, expires_at=expires_at)

        logger.info(f"Issued email OTP for {key}, expires {expires_at.isoformat()}")
        return OtpChallenge(code=code, expires_at=expires_at)

    def verify_otp(self, email: str, code: str) -> bool:
        """
        Check a submitted code. Never raises.

        Expired records are purged. A wrong or malformed code (including
        non-ASCII text) counts as an attempt and the record is purged once
        ``max_attempts`` is reached. A correct code consumes the record.
        """
        key = normalize_email(email)
        submitted = str(code or "").strip()

        with self._lock:
            pending = self._pending.get(key)
            if pending is None:
                logger.info(f"OTP verify for {key}: no pending code")
                return False

            if self.clock() > pending.expires_at:
                del self._pending[key]
                logger.info(f"OTP verify for {key}: expired")
                return False

            if not secrets.compare_digest(pending.code.encode(), submitted.encode()):
                pending.attempts += 1
                if pending.attempts >= self.max_attempts:
                    del self._pending[key]
                    logger.warning(f"OTP for {key} purged after {pending.attempts} failed attempts")
                else:
                    logger.info(f"OTP verify for {key}: mismatch ({pending.attempts}/{self.max_attempts})")
                return False

            del self._pending[key]

        logger.info(f"OTP verified for {key}")
        return True

    def pending(self, email: str) -> bool:
        """Whether a live code exists for the email (expired ones are purged)."""
        key = normalize_email(email)
        with self._lock:
            pending = self._pending.get(key)
            if pending is None:
                return False
            if self.clock() > pending.expires_at:
                del self._pending[key]
                return False
            return True

    def attempts(self, email: str) -> int:
        """Failed attempts recorded against the pending code (0 if none)."""
        with self._lock:
            pending = self._pending.get(normalize_email(email))
            return pending.attempts if pending else 0
