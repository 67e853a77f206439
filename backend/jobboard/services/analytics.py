"""
Analytics Engine.

Appends login / application / page-view events to the analytics log and
derives the admin summary from the full log on every call. Nothing derived
is stored.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jobboard.core.logger import get_logger
from jobboard.db.repositories import (
    APPLICATIONS,
    LOGINS,
    PAGE_VIEWS,
    AnalyticsRepository,
    UserRepository,
)
from jobboard.models import (
    AnalyticsSummary,
    ApplicationEvent,
    JobApplicationStats,
    LoginEvent,
    PageViewEvent,
    UserApplicationEntry,
    UserApplications,
)
from jobboard.models.analytics import JobId

logger = get_logger("analytics")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parse a stored ISO-8601 timestamp ('Z' suffix accepted).

    Naive values are taken as UTC. Returns None if unparseable.
    """
    text = str(value or "").strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _is_recent(timestamp: str, cutoff: datetime) -> bool:
    parsed = parse_timestamp(timestamp)
    return parsed is not None and parsed >= cutoff


class AnalyticsEngine:
    def __init__(
        self,
        events: AnalyticsRepository,
        users: UserRepository,
        clock: Callable[[], datetime] = utc_now,
        recent_days: int = 30,
        history_limit: int = 100,
    ):
        self.events = events
        self.users = users
        self.clock = clock
        self.recent_days = recent_days
        self.history_limit = history_limit

    def _timestamp(self) -> str:
        return self.clock().astimezone(timezone.utc).isoformat()

    # ============== Recording ==============

    def record_login(self, user_id: int, email: str) -> LoginEvent:
        event = LoginEvent(user_id=user_id, email=email, timestamp=self._timestamp())
        self.events.append(LOGINS, event)
        return event

    def record_application(
        self, user_id: int, email: str, job_id: JobId, job_title: str, company: str
    ) -> ApplicationEvent:
        event = ApplicationEvent(
            user_id=user_id,
            email=email,
            job_id=job_id,
            job_title=job_title,
            company=company,
            timestamp=self._timestamp(),
        )
        self.events.append(APPLICATIONS, event)
        logger.info(f"Application tracked: user {user_id} -> job {job_id}")
        return event

    def record_page_view(self, user_id: int, email: str, page: str) -> PageViewEvent:
        event = PageViewEvent(user_id=user_id, email=email, page=page, timestamp=self._timestamp())
        self.events.append(PAGE_VIEWS, event)
        return event

    # ============== Aggregation ==============

    def summarize(self, now: Optional[datetime] = None) -> AnalyticsSummary:
        """
        Compute the admin summary over the whole log.

        Args:
            now: Reference time for the recency window (defaults to the clock)
        """
        log = self.events.load()
        reference = now or self.clock()
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=timezone.utc)
        cutoff = reference - timedelta(days=self.recent_days)

        by_job: dict[str, JobApplicationStats] = {}
        by_user: dict[int, UserApplications] = {}

        for app in log.applications:
            # Job ids group by their string form: 7 and "7" are the same job.
            job_key = str(app.job_id)
            stats = by_job.get(job_key)
            if stats is None:
                stats = by_job[job_key] = JobApplicationStats(
                    job_id=app.job_id, job_title=app.job_title, company=app.company
                )
            stats.count += 1
            if app.user_id not in stats.users:
                stats.users.append(app.user_id)

            history = by_user.get(app.user_id)
            if history is None:
                history = by_user[app.user_id] = UserApplications(
                    user_id=app.user_id, email=app.email
                )
            history.applications.append(
                UserApplicationEntry(
                    job_id=app.job_id,
                    job_title=app.job_title,
                    company=app.company,
                    timestamp=app.timestamp,
                )
            )

        # sorted() is stable, so equal counts keep first-seen order.
        applications_by_job = sorted(by_job.values(), key=lambda s: s.count, reverse=True)

        limit = self.history_limit
        return AnalyticsSummary(
            total_users=self.users.count_by_role("user"),
            unique_logged_in_users=len({login.user_id for login in log.logins}),
            total_logins=len(log.logins),
            recent_logins=sum(1 for e in log.logins if _is_recent(e.timestamp, cutoff)),
            total_applications=len(log.applications),
            recent_applications=sum(1 for e in log.applications if _is_recent(e.timestamp, cutoff)),
            total_page_views=len(log.page_views),
            recent_page_views=sum(1 for e in log.page_views if _is_recent(e.timestamp, cutoff)),
            applications_by_job=applications_by_job,
            user_applications=list(by_user.values()),
            login_history=list(reversed(log.logins[-limit:])) if limit > 0 else [],
            application_history=list(reversed(log.applications[-limit:])) if limit > 0 else [],
        )
