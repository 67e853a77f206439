"""
Analytics log events and the admin summary.

Stored and served with camelCase keys (``userId``, ``jobTitle``) so the log
file and the admin console share one shape.
"""

from typing import Union

from pydantic import Field

from jobboard.models.base import CamelModel

JobId = Union[int, str]


# ============== Log Events ==============


class LoginEvent(CamelModel):
    user_id: int
    email: str
    timestamp: str


class ApplicationEvent(CamelModel):
    user_id: int
    email: str
    job_id: JobId
    job_title: str
    company: str
    timestamp: str


class PageViewEvent(CamelModel):
    user_id: int
    email: str
    page: str
    timestamp: str


class AnalyticsLog(CamelModel):
    """The whole analytics document: three independent append-only sequences."""

    logins: list[LoginEvent] = Field(default_factory=list)
    applications: list[ApplicationEvent] = Field(default_factory=list)
    page_views: list[PageViewEvent] = Field(default_factory=list)


# ============== Summary ==============


class JobApplicationStats(CamelModel):
    job_id: JobId
    job_title: str
    company: str
    count: int = 0
    users: list[int] = Field(default_factory=list)


class UserApplicationEntry(CamelModel):
    job_id: JobId
    job_title: str
    company: str
    timestamp: str


class UserApplications(CamelModel):
    user_id: int
    email: str
    applications: list[UserApplicationEntry] = Field(default_factory=list)


class AnalyticsSummary(CamelModel):
    total_users: int
    unique_logged_in_users: int
    total_logins: int
    recent_logins: int
    total_applications: int
    recent_applications: int
    total_page_views: int
    recent_page_views: int
    applications_by_job: list[JobApplicationStats]
    user_applications: list[UserApplications]
    login_history: list[LoginEvent]
    application_history: list[ApplicationEvent]
