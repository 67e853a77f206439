"""
Security utilities for authentication and authorization.

Provides password hashing (bcrypt) and signed session tokens (JWT), plus the
cookie/header transport used to carry those tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Request, Response
from jwt.exceptions import InvalidTokenError
from passlib.context import CryptContext
from pydantic import ValidationError

from jobboard.core.config import Settings
from jobboard.core.errors import Unauthorized
from jobboard.core.logger import get_logger
from jobboard.models import Identity

logger = get_logger("sessions")


def build_password_context(rounds: int = 12) -> CryptContext:
    """
    Build the bcrypt hashing context.

    Args:
        rounds: bcrypt cost factor (log2 of the iteration count)

    Returns:
        A passlib CryptContext
    """
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


class SessionEngine:
    """
    Issues and verifies stateless session tokens.

    Tokens carry ``uid``, ``email`` and ``role`` and expire a fixed number of
    days after issuance. There is no revocation list: a token stays valid
    until ``exp`` even after logout or a role change.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(days=7)):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(self, identity: Identity, now: Optional[datetime] = None) -> str:
        """
        Create a signed token for an identity.

        Args:
            identity: The claims to embed
            now: Issuance time (defaults to the current UTC time)

        Returns:
            The encoded JWT string
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "uid": identity.uid,
            "email": identity.email,
            "role": identity.role,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Identity:
        """
        Decode and validate a token.

        Every failure (missing, malformed, bad signature, expired, missing
        claims) collapses into the same Unauthorized error.
        """
        if not token:
            raise Unauthorized()
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "uid", "email", "role"]},
            )
            return Identity(uid=payload["uid"], email=payload["email"], role=payload["role"])
        except (InvalidTokenError, ValidationError) as e:
            logger.info(f"Token verification failed: {type(e).__name__}")
            raise Unauthorized() from None


def extract_token(request: Request, cookie_name: str = "session") -> Optional[str]:
    """
    Pull the session token from the request.

    The cookie wins; ``Authorization: Bearer <token>`` is the fallback for
    cross-origin clients that cannot send cookies.
    """
    token = request.cookies.get(cookie_name)
    if token:
        return token

    auth_header = request.headers.get("authorization", "")
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def _cookie_flags(settings: Settings) -> dict:
    return {
        "httponly": True,
        "samesite": "none" if settings.is_production else "lax",
        "secure": settings.is_production,
        "path": "/",
    }


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.SESSION_TTL_DAYS * 24 * 60 * 60,
        **_cookie_flags(settings),
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.SESSION_COOKIE_NAME, **_cookie_flags(settings))
