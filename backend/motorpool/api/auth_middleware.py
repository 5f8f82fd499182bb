"""
Authentication middleware.

The identity provider sits in front of this service and forwards the
authenticated caller in request headers. This module turns those headers
into a ``Principal`` on ``g``.
"""

import logging
from functools import wraps
from typing import Optional

from flask import g, request

from motorpool.config import settings
from motorpool.models.user import Role
from motorpool.utils.exceptions import AuthenticationRequiredError
from motorpool.utils.principal import Principal

logger = logging.getLogger(__name__)

# Routes that don't require authentication
PUBLIC_ROUTES = [
    "/health",
]


def principal_from_headers(headers) -> Optional[Principal]:
    """Build a principal from the forwarded identity headers, or None."""
    user_id = (headers.get(settings.auth_user_id_header) or "").strip()
    if not user_id:
        return None

    raw_role = (headers.get(settings.auth_user_role_header) or Role.EMPLOYEE.value).strip().upper()
    try:
        role = Role(raw_role)
    except ValueError:
        logger.warning(f"Rejected principal {user_id} with unknown role {raw_role!r}")
        raise AuthenticationRequiredError(f"Unrecognized role: {raw_role}")

    email = (headers.get(settings.auth_user_email_header) or "").strip() or None
    return Principal(id=user_id, role=role, email=email)


def init_auth_middleware(app):
    """
    Initialize authentication middleware for the Flask app.

    Runs before every request and attaches ``g.principal`` (or None).
    """

    @app.before_request
    def authenticate_request():
        g.principal = None

        path = request.path
        if request.method == "OPTIONS":
            return None
        if any(path.startswith(r) for r in PUBLIC_ROUTES):
            return None

        g.principal = principal_from_headers(request.headers)

        if g.principal is None and path.startswith("/api/"):
            raise AuthenticationRequiredError()
        return None


def require_auth(f):
    """
    Decorator to require an authenticated principal for a route.

    Usage:
        @bp.route("/protected")
        @require_auth
        def protected_route():
            principal = current_principal()  # Guaranteed to exist
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if getattr(g, "principal", None) is None:
            raise AuthenticationRequiredError()
        return f(*args, **kwargs)
    return decorated_function


def current_principal() -> Principal:
    principal = getattr(g, "principal", None)
    if principal is None:
        raise AuthenticationRequiredError()
    return principal
