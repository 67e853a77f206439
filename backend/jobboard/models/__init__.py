from jobboard.models.user import Identity, Role, UserRecord, normalize_email, normalize_mobile
from jobboard.models.analytics import (
    AnalyticsLog,
    AnalyticsSummary,
    ApplicationEvent,
    JobApplicationStats,
    LoginEvent,
    PageViewEvent,
    UserApplicationEntry,
    UserApplications,
)

__all__ = [
    "Identity",
    "Role",
    "UserRecord",
    "normalize_email",
    "normalize_mobile",
    "AnalyticsLog",
    "AnalyticsSummary",
    "ApplicationEvent",
    "JobApplicationStats",
    "LoginEvent",
    "PageViewEvent",
    "UserApplicationEntry",
    "UserApplications",
]
