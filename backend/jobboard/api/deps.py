"""
Access Control Gate.

FastAPI dependencies that authenticate the session token and check the role
claim. The role comes from the token, not from the store, so a role change
only takes effect once a new token is issued.
"""

from fastapi import Depends, Request

from jobboard.core.errors import Forbidden
from jobboard.core.security import extract_token
from jobboard.models import Identity
from jobboard.services import Services


def get_services(request: Request) -> Services:
    return request.app.state.services


def require_authenticated(
    request: Request,
    services: Services = Depends(get_services),
) -> Identity:
    """Return the token's identity or raise Unauthorized."""
    token = extract_token(request, services.settings.SESSION_COOKIE_NAME)
    return services.sessions.verify(token)


def require_admin(identity: Identity = Depends(require_authenticated)) -> Identity:
    """Like require_authenticated, plus Forbidden for non-admin roles."""
    if not identity.is_admin:
        raise Forbidden("Admin access required")
    return identity
