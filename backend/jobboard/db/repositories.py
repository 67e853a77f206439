"""Typed access to the users collection and the analytics log."""

from typing import Optional

from pydantic import ValidationError

from jobboard.core.errors import Conflict
from jobboard.core.logger import get_logger
from jobboard.db.store import RecordStore
from jobboard.models.base import CamelModel
from jobboard.models import (
    AnalyticsLog,
    ApplicationEvent,
    LoginEvent,
    PageViewEvent,
    UserRecord,
    normalize_email,
    normalize_mobile,
)

logger = get_logger("store")

USERS = "users"
ANALYTICS = "analytics"

LOGINS = "logins"
APPLICATIONS = "applications"
PAGE_VIEWS = "pageViews"

EVENT_TYPES: dict[str, type[CamelModel]] = {
    LOGINS: LoginEvent,
    APPLICATIONS: ApplicationEvent,
    PAGE_VIEWS: PageViewEvent,
}


def empty_analytics() -> dict:
    return {LOGINS: [], APPLICATIONS: [], PAGE_VIEWS: []}


def _find_email(rows: list[dict], email: str) -> Optional[dict]:
    wanted = normalize_email(email)
    for row in rows:
        if normalize_email(row.get("email", "")) == wanted:
            return row
    return None


def _find_mobile(rows: list[dict], mobile: str) -> Optional[dict]:
    wanted = normalize_mobile(mobile)
    if not wanted:
        return None
    for row in rows:
        stored = row.get("mobile")
        if stored and normalize_mobile(stored) == wanted:
            return row
    return None


class UserRepository:
    """The users collection."""

    def __init__(self, store: RecordStore):
        self.store = store

    def _rows(self) -> list[dict]:
        return self.store.read_all(USERS, [])

    @staticmethod
    def _parse(row: dict) -> Optional[UserRecord]:
        try:
            return UserRecord.model_validate(row)
        except ValidationError as e:
            logger.warning(f"Skipping malformed user row {row.get('id')!r}: {e.error_count()} errors")
            return None

    def all(self) -> list[UserRecord]:
        return [user for user in map(self._parse, self._rows()) if user is not None]

    def get_by_id(self, user_id: int) -> Optional[UserRecord]:
        return next((user for user in self.all() if user.id == user_id), None)

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        row = _find_email(self._rows(), email)
        return self._parse(row) if row else None

    def get_by_mobile(self, mobile: str) -> Optional[UserRecord]:
        row = _find_mobile(self._rows(), mobile)
        return self._parse(row) if row else None

    def count_by_role(self, role: str) -> int:
        return sum(1 for user in self.all() if user.role == role)

    def create(
        self,
        email: str,
        password_hash: str,
        role: str = "user",
        name: Optional[str] = None,
        mobile: Optional[str] = None,
    ) -> UserRecord:
        """
        Insert a new user with id = max existing id + 1 (1 when empty).

        Email and mobile uniqueness are re-checked under the store lock.

        Raises:
            Conflict: if the email or mobile is already registered
        """

        def _insert(rows: list[dict]) -> UserRecord:
            if _find_email(rows, email):
                raise Conflict("email already exists")
            if mobile and _find_mobile(rows, mobile):
                raise Conflict("mobile number already exists")

            next_id = max((int(row.get("id") or 0) for row in rows), default=0) + 1
            user = UserRecord(
                id=next_id,
                email=normalize_email(email),
                password_hash=password_hash,
                role=role,
                name=name or None,
                mobile=mobile or None,
            )
            rows.append(user.model_dump())
            return user

        return self.store.update(USERS, [], _insert)

    def save(self, user: UserRecord) -> UserRecord:
        """Replace the row with the same id (append if it is gone)."""

        def _replace(rows: list[dict]) -> UserRecord:
            for index, row in enumerate(rows):
                if row.get("id") == user.id:
                    rows[index] = user.model_dump()
                    break
            else:
                rows.append(user.model_dump())
            return user

        return self.store.update(USERS, [], _replace)


class AnalyticsRepository:
    """The append-only analytics log (logins, applications, pageViews)."""

    def __init__(self, store: RecordStore):
        self.store = store

    def load(self) -> AnalyticsLog:
        """Load the log, dropping individual events that fail to parse."""
        document = self.store.read_all(ANALYTICS, empty_analytics())
        parsed: dict[str, list] = {}

        for kind, model in EVENT_TYPES.items():
            events = document.get(kind) or []
            if not isinstance(events, list):
                logger.warning(f"Analytics sequence '{kind}' is not a list, ignoring it")
                events = []
            parsed[kind] = []
            for raw in events:
                try:
                    parsed[kind].append(model.model_validate(raw))
                except ValidationError:
                    logger.warning(f"Skipping malformed {kind} event: {raw!r}")

        return AnalyticsLog(
            logins=parsed[LOGINS],
            applications=parsed[APPLICATIONS],
            page_views=parsed[PAGE_VIEWS],
        )

    def append(self, kind: str, event: CamelModel) -> None:
        if kind not in EVENT_TYPES:
            raise ValueError(f"Unknown analytics sequence '{kind}'")

        def _append(document: dict) -> None:
            sequence = document.get(kind)
            if not isinstance(sequence, list):
                sequence = document[kind] = []
            sequence.append(event.dump())

        self.store.update(ANALYTICS, empty_analytics(), _append)
