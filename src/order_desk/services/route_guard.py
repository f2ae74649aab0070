"""Role-based gating of dashboard views."""
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol
from urllib.parse import urlsplit

from ..schemas import User

logger = logging.getLogger(__name__)

LOGIN_ROUTE = "/login"
DEFAULT_ROUTE = "/dashboard"


class AccessState(StrEnum):
    """Access level derived from the current session."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_NON_ADMIN = "authenticated-non-admin"
    AUTHENTICATED_ADMIN = "authenticated-admin"


@dataclass(frozen=True)
class Route:
    """A navigable view and what it requires."""

    path: str
    requires_auth: bool = True
    admin_only: bool = False
    redirect_to: str | None = None


ROUTES: dict[str, Route] = {
    route.path: route
    for route in (
        Route(LOGIN_ROUTE, requires_auth=False),
        Route("/", requires_auth=False, redirect_to=DEFAULT_ROUTE),
        Route("/dashboard"),
        Route("/orders"),
        Route("/clients", admin_only=True),
        Route("/settings"),
        Route("/account"),
    )
}


@dataclass(frozen=True)
class GuardDecision:
    """Outcome of a navigation check. ``redirect_to`` is set when not allowed."""

    allowed: bool
    path: str
    redirect_to: str | None = None
    reason: str | None = None


def access_state(user: User | None) -> AccessState:
    """Map the session's user to an access state."""
    if user is None:
        return AccessState.UNAUTHENTICATED
    if user.is_admin:
        return AccessState.AUTHENTICATED_ADMIN
    return AccessState.AUTHENTICATED_NON_ADMIN


def normalize_path(path: str) -> str:
    """Drop query string and fragment, and any trailing slash except on '/'."""
    bare = urlsplit(path).path or "/"
    if len(bare) > 1:
        bare = bare.rstrip("/") or "/"
    return bare


def check_access(path: str, user: User | None) -> GuardDecision:
    """
    Decide whether ``path`` is reachable for ``user``.

    - unauthenticated: protected routes redirect to the login view
    - authenticated non-admin: admin-only routes redirect to the default view
    - authenticated admin: everything is reachable
    - authenticated users asking for the login view go to the default view
    - unknown paths redirect to the default view
    """
    bare = normalize_path(path)
    state = access_state(user)
    route = ROUTES.get(bare)

    if route is None:
        return GuardDecision(False, path, DEFAULT_ROUTE, "not_found")
    if route.redirect_to:
        return GuardDecision(False, path, route.redirect_to, "alias")
    if route.path == LOGIN_ROUTE:
        if state is AccessState.UNAUTHENTICATED:
            return GuardDecision(True, path)
        return GuardDecision(False, path, DEFAULT_ROUTE, "already_authenticated")
    if route.requires_auth and state is AccessState.UNAUTHENTICATED:
        return GuardDecision(False, path, LOGIN_ROUTE, "unauthenticated")
    if route.admin_only and state is not AccessState.AUTHENTICATED_ADMIN:
        return GuardDecision(False, path, DEFAULT_ROUTE, "forbidden")
    return GuardDecision(True, path)


class SessionStoreLike(Protocol):
    """Anything exposing the current ``user``; SessionStore satisfies this."""

    @property
    def user(self) -> User | None: ...


class RouteGuard:
    """
    Navigation gate bound to a session store.

    The decision is recomputed from the store on every call; nothing is cached
    across calls.
    """

    def __init__(self, session_store: SessionStoreLike) -> None:
        self._store = session_store

    @property
    def state(self) -> AccessState:
        return access_state(self._store.user)

    def check(self, path: str) -> GuardDecision:
        decision = check_access(path, self._store.user)
        if not decision.allowed:
            logger.debug(
                "route_redirect path=%s redirect_to=%s reason=%s",
                path, decision.redirect_to, decision.reason,
            )
        return decision

    def resolve(self, path: str) -> str:
        """Follow redirects and return the path that will actually render."""
        seen: set[str] = set()
        current = path
        while True:
            decision = self.check(current)
            if decision.allowed or decision.redirect_to is None:
                return current
            if decision.redirect_to in seen:
                return decision.redirect_to
            seen.add(current)
            current = decision.redirect_to
