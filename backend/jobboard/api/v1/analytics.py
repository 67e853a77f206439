"""
Analytics API endpoints.

Signed-in users record applications and page views; the admin console reads
the summary.
"""

from fastapi import APIRouter, Depends
from pydantic import field_validator

from jobboard.api.deps import get_services, require_admin, require_authenticated
from jobboard.models import AnalyticsSummary, Identity
from jobboard.models.analytics import JobId
from jobboard.models.base import CamelModel
from jobboard.services import Services

router = APIRouter()


# ============== Pydantic Schemas ==============


class ApplicationRequest(CamelModel):
    """Schema for an application action (job ids may be numbers or strings)."""

    job_id: JobId
    job_title: str
    company: str

    @field_validator("job_id", "job_title", "company", mode="before")
    @classmethod
    def not_blank(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("required")
        return v.strip() if isinstance(v, str) else v


class PageViewRequest(CamelModel):
    page: str

    @field_validator("page", mode="before")
    @classmethod
    def not_blank(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("required")
        return v.strip()


# ============== API Endpoints ==============


@router.post("/application")
async def track_application(
    payload: ApplicationRequest,
    identity: Identity = Depends(require_authenticated),
    services: Services = Depends(get_services),
):
    """Record that the signed-in user applied to a job."""
    services.analytics.record_application(
        identity.uid, identity.email, payload.job_id, payload.job_title, payload.company
    )
    return {"success": True}


@router.post("/page-view")
async def track_page_view(
    payload: PageViewRequest,
    identity: Identity = Depends(require_authenticated),
    services: Services = Depends(get_services),
):
    services.analytics.record_page_view(identity.uid, identity.email, payload.page)
    return {"success": True}


@router.get("/summary", response_model=AnalyticsSummary)
async def get_summary(
    _: Identity = Depends(require_admin),
    services: Services = Depends(get_services),
):
    """
    Admin-only usage summary.

    Computed from the whole log on every request: totals, 30-day counts,
    per-job leaderboard, per-user history and the latest 100 events of each
    kind.
    """
    return services.analytics.summarize()
