"""
Credential Engine.

Password hashing/verification, account creation and the bootstrap admin.
"""

from typing import Optional

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from jobboard.core.errors import Conflict, Unauthorized
from jobboard.core.logger import get_logger
from jobboard.db.repositories import UserRepository
from jobboard.models import UserRecord, normalize_email

logger = get_logger("auth")

INVALID_CREDENTIALS = "invalid credentials"


class CredentialEngine:
    def __init__(self, users: UserRepository, password_context: CryptContext):
        self.users = users
        self.password_context = password_context

    def hash_password(self, plain: str) -> str:
        """Salted bcrypt hash; the raw password is never stored."""
        return self.password_context.hash(plain)

    def verify_password(self, plain: str, password_hash: str) -> bool:
        """Constant-time check delegated to bcrypt. Malformed hashes never match."""
        if not password_hash:
            return False
        try:
            return self.password_context.verify(plain, password_hash)
        except (UnknownHashError, ValueError):
            return False

    def ensure_admin(self, email: str, password: str) -> UserRecord:
        """
        Make sure the bootstrap admin exists.

        - existing admin: left untouched
        - existing non-admin: promoted, password reset to ``password``
        - missing: created as admin
        """
        email_normalized = normalize_email(email)
        existing = self.users.get_by_email(email_normalized)

        if existing and existing.is_admin:
            logger.info(f"Bootstrap admin {email_normalized} already present")
            return existing

        if existing:
            promoted = existing.model_copy(
                update={"role": "admin", "password_hash": self.hash_password(password)}
            )
            self.users.save(promoted)
            logger.warning(f"Promoted {email_normalized} to admin and reset its password")
            return promoted

        admin = self.users.create(
            email=email_normalized,
            password_hash=self.hash_password(password),
            role="admin",
        )
        logger.info(f"Created bootstrap admin {email_normalized} (id={admin.id})")
        return admin

    def ensure_available(self, email: str, mobile: Optional[str] = None) -> None:
        """
        Raise Conflict if the email (or mobile) is already taken.

        Called before spending an OTP check; ``create_user`` checks again.
        """
        if self.users.get_by_email(email):
            raise Conflict("email already exists")
        if mobile and self.users.get_by_mobile(mobile):
            raise Conflict("mobile number already exists")

    def create_user(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        mobile: Optional[str] = None,
    ) -> UserRecord:
        """Create a regular (role=user) account."""
        user = self.users.create(
            email=email,
            password_hash=self.hash_password(password),
            role="user",
            name=name,
            mobile=mobile,
        )
        logger.info(f"Registered user {user.email} (id={user.id})")
        return user

    def authenticate(self, email: str, password: str) -> UserRecord:
        """
        Check an email/password pair.

        Unknown email and wrong password raise the same Unauthorized error so
        callers cannot enumerate accounts.
        """
        email_normalized = normalize_email(email)
        user = self.users.get_by_email(email_normalized)
        if user is None:
            logger.info(f"Login failed, unknown email: {email_normalized}")
            raise Unauthorized(INVALID_CREDENTIALS)
        if not self.verify_password(password, user.password_hash):
            logger.info(f"Login failed, password mismatch: {email_normalized}")
            raise Unauthorized(INVALID_CREDENTIALS)

        logger.info(f"Login success: {email_normalized}, role: {user.role}")
        return user
