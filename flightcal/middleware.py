"""
middleware.py — Session gate for page and API routes.
Checks only that a session cookie is present; expiry is enforced later by
validate_session(), so a stale cookie gets through and is served as anonymous.
"""

from typing import NamedTuple

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from flightcal.config import SESSION_COOKIE_NAME

LOGIN_PATH = "/login"
HOME_PATH = "/"
STATIC_PREFIX = "/static"


class RoutePattern(NamedTuple):
    path: str
    exact: bool

    def matches(self, pathname: str) -> bool:
        if self.exact:
            return pathname == self.path
        return pathname.startswith(self.path)


# Routes reachable without a session cookie
PUBLIC_ROUTES = (
    RoutePattern("/login", exact=False),
    RoutePattern("/api/auth", exact=False),
    RoutePattern("/api/init", exact=False),
    RoutePattern("/api", exact=True),
)


def is_public_path(pathname: str) -> bool:
    return any(route.matches(pathname) for route in PUBLIC_ROUTES)


def is_static_path(pathname: str) -> bool:
    if pathname.startswith(STATIC_PREFIX):
        return True
    # a file name such as favicon.ico or sw.js
    return "." in pathname.rsplit("/", 1)[-1]


def gate_decision(pathname: str, has_session_cookie: bool) -> str | None:
    """Return the redirect target for a request, or None to let it through."""
    if is_static_path(pathname):
        return None
    # The calendar page works without login (local storage mode)
    if pathname == HOME_PATH:
        return None
    public = is_public_path(pathname)
    if not has_session_cookie and not public:
        return LOGIN_PATH
    if has_session_cookie and pathname == LOGIN_PATH:
        return HOME_PATH
    return None


class SessionGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        has_cookie = bool(request.cookies.get(SESSION_COOKIE_NAME))
        target = gate_decision(request.url.path, has_cookie)
        if target is not None:
            return RedirectResponse(url=target, status_code=307)
        return await call_next(request)
