"""Wiring of the session, cache, queries and guard into one application object."""
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from .api_client import ApiClient
from .core.config import Settings, get_settings
from .core.storage import JsonFileStorage, KeyValueStorage
from .schemas import Session
from .services.preferences import Preferences
from .services.query_cache import QueryCache
from .services.resource_queries import ResourceQueries
from .services.route_guard import RouteGuard
from .services.session_store import SessionStore
from .services.views import ClientsView, DashboardView, OrdersView, UsersView

logger = logging.getLogger(__name__)


@dataclass
class App:
    """
    One instance per process.

    Created through ``create_app``; call ``aclose`` (or use ``async with``)
    to release the HTTP connection pool.
    """

    settings: Settings
    storage: KeyValueStorage
    api: ApiClient
    session: SessionStore
    cache: QueryCache
    queries: ResourceQueries
    guard: RouteGuard
    preferences: Preferences
    _unsubscribe: list[Callable[[], None]] = field(default_factory=list, repr=False)

    @property
    def dashboard(self) -> DashboardView:
        return DashboardView(self.queries)

    @property
    def orders(self) -> OrdersView:
        return OrdersView(self.queries)

    @property
    def clients(self) -> ClientsView:
        return ClientsView(self.queries)

    @property
    def users(self) -> UsersView:
        return UsersView(self.queries)

    async def aclose(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe.clear()
        await self.api.aclose()

    async def __aenter__(self) -> "App":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def create_app(
    settings: Settings | None = None,
    storage: KeyValueStorage | None = None,
    http_client: httpx.AsyncClient | None = None,
    restore: bool = True,
) -> App:
    """
    Build the application and rehydrate the session from storage.

    The cache is cleared whenever the session becomes unauthenticated so one
    user's data is never served to the next.
    """
    settings = settings or get_settings()
    storage = storage if storage is not None else JsonFileStorage(settings.storage_path)
    api = ApiClient(settings=settings, http_client=http_client)
    session = SessionStore(api, storage)
    cache = QueryCache()

    def on_session_change(new_session: Session) -> None:
        if not new_session.is_authenticated:
            cache.clear()

    app = App(
        settings=settings,
        storage=storage,
        api=api,
        session=session,
        cache=cache,
        queries=ResourceQueries(api, cache),
        guard=RouteGuard(session),
        preferences=Preferences(storage),
    )
    app._unsubscribe.append(session.subscribe(on_session_change))
    if restore:
        session.restore()
    logger.debug("app_created api_url=%s authenticated=%s", settings.api_url, session.is_authenticated)
    return app
