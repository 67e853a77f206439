from typing import Literal, Optional

from pydantic import BaseModel

Role = Literal["user", "admin"]

ASCII_DIGITS = frozenset("0123456789")


def normalize_email(email: str) -> str:
    """Emails are unique case- and whitespace-insensitively."""
    return str(email or "").strip().lower()


class UserRecord(BaseModel):
    """A row of the users collection, stored with the password hash."""

    id: int
    email: str
    password_hash: str
    role: Role = "user"
    name: Optional[str] = None
    mobile: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class Identity(BaseModel):
    """Claims carried by a session token."""

    uid: int
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def normalize_mobile(mobile: str) -> str:
    """Keep ASCII digits and a single leading '+'; drop everything else."""
    raw = str(mobile or "").strip()
    digits = "".join(ch for ch in raw if ch in ASCII_DIGITS)
    if raw.startswith("+"):
        return "+" + digits
    return digits
