"""
Session store: single source of truth for who is logged in.

The session lives in memory and is mirrored to durable storage under the
``token`` and ``user`` keys. Only this module writes those keys.
"""
import logging
from collections.abc import Callable

from pydantic import ValidationError

from ..api_client import ApiClient
from ..core.storage import TOKEN_KEY, USER_KEY, KeyValueStorage
from ..schemas import Session, User
from ..shared.api_errors import INVALID_RESPONSE_MESSAGE, ApiError

logger = logging.getLogger(__name__)

SessionListener = Callable[[Session], None]


class SessionStore:
    """
    Holds the authenticated user and token.

    Listeners registered with ``subscribe`` are called with the new Session
    after every login, logout and restore.

    Invariant: ``is_authenticated == (user is not None)``, and a user is only
    ever set together with a token.
    """

    def __init__(self, api: ApiClient, storage: KeyValueStorage) -> None:
        self._api = api
        self._storage = storage
        self._session = Session()
        self._listeners: list[SessionListener] = []
        self._pending_logins = 0
        api.set_token_provider(self.get_token)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def user(self) -> User | None:
        return self._session.user

    @property
    def token(self) -> str | None:
        return self._session.token

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def is_loading(self) -> bool:
        """True while a login request is in flight."""
        return self._pending_logins > 0

    def get_token(self) -> str | None:
        """Token provider for the API client."""
        return self._session.token

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a listener for session changes.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_session(self, session: Session) -> None:
        self._session = session
        for listener in list(self._listeners):
            listener(session)

    def restore(self) -> Session:
        """
        Rehydrate the session from durable storage.

        A stored user blob that fails to parse wipes both keys and leaves the
        session unauthenticated.
        """
        token = self._storage.get(TOKEN_KEY)
        user_data = self._storage.get(USER_KEY)

        session = Session()
        if token and user_data:
            try:
                session = Session(user=User.model_validate_json(user_data), token=token)
            except ValidationError:
                logger.warning("session_restore_corrupt_user")
                self._clear_storage()
        self._set_session(session)
        logger.debug("session_restored authenticated=%s", session.is_authenticated)
        return session

    async def login(self, email: str, password: str) -> User:
        """
        Authenticate against the backend and persist the session.

        Concurrent logins are not serialized; the last response to arrive wins.

        Raises:
            ApiError: If the request fails or the response lacks a token or
                user. The current session is left untouched.
        """
        self._pending_logins += 1
        try:
            response = await self._api.login(email, password)
        except ApiError:
            logger.info("login_failed email=%s", email)
            raise
        finally:
            self._pending_logins -= 1

        if not response.token or response.user is None:
            logger.info("login_failed email=%s reason=invalid_response", email)
            raise ApiError(INVALID_RESPONSE_MESSAGE)

        self._storage.set(TOKEN_KEY, response.token)
        self._storage.set(USER_KEY, response.user.model_dump_json(by_alias=True))
        self._set_session(Session(user=response.user, token=response.token))
        logger.info("login_succeeded user_id=%s role=%s", response.user.id, response.user.role)
        return response.user

    async def logout(self) -> None:
        """
        End the session.

        The server is told first, but the local session is cleared whatever
        the outcome of that call, network failures included.
        """
        try:
            await self._api.logout()
        except ApiError as e:
            logger.warning("logout_server_call_failed error=%s", e.message)
        finally:
            self._clear_storage()
            self._set_session(Session())
            logger.info("logout_completed")

    def _clear_storage(self) -> None:
        self._storage.remove(TOKEN_KEY)
        self._storage.remove(USER_KEY)
