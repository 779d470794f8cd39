"""
Admin UI route guard.

Decides, for a requested admin-UI path, whether the page is rendered or the
browser is sent elsewhere. The decision only looks at the caller's auth state:
a token must be present and the user's role must be ``admin``.
"""

from dataclasses import dataclass
from typing import Optional

LOGIN_PATH = "/login"
HOME_PATH = "/dashboard"

PUBLIC_PAGES = {
    "/login": "LoginPage",
    "/register": "RegisterPage",
}

ADMIN_PAGES = {
    "/dashboard": "AdminDashboard",
    "/admin": "AdminPanel",
}


@dataclass
class AuthState:
    token: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == "admin"


@dataclass
class RouteDecision:
    path: str
    page: Optional[str] = None
    redirect_to: Optional[str] = None

    @property
    def render(self) -> bool:
        return self.page is not None


def _normalize(path: str) -> str:
    path = "/" + (path or "").strip().strip("/")
    return path.lower()


def resolve_admin_route(state: AuthState, path: str) -> RouteDecision:
    path = _normalize(path)
    if path in PUBLIC_PAGES:
        return RouteDecision(path=path, page=PUBLIC_PAGES[path])
    if path in ADMIN_PAGES:
        if not state.is_admin:
            return RouteDecision(path=path, redirect_to=LOGIN_PATH)
        return RouteDecision(path=path, page=ADMIN_PAGES[path])
    # "/" and anything unknown
    return RouteDecision(path=path, redirect_to=HOME_PATH)
