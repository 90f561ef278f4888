"""Process-wide session context.

Started once at login, ended at logout. Record modules only read it.
"""

import logging
from collections.abc import Callable

from dairy_dashboard.application.interfaces import AuthGateway
from dairy_dashboard.domain.entities import UserSession
from dairy_dashboard.domain.exceptions import (
    AuthenticationFailedError,
    FarmApiError,
    NotAuthenticatedError,
)
from dairy_dashboard.infrastructure.logging.colored_logger import Activity, ActivityLogger
from dairy_dashboard.infrastructure.logging.log_config import RECORDS_LOGGER

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


class SessionContext:
    """Holds the signed-in user for the whole process."""

    def __init__(self, auth_gateway: AuthGateway | None = None):
        self._auth_gateway = auth_gateway
        self._current: UserSession | None = None
        self._teardown_hooks: list[Callable[[], None]] = []
        self._log = ActivityLogger(RECORDS_LOGGER, "session")

    @property
    def current(self) -> UserSession | None:
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    def require(self) -> UserSession:
        if self._current is None:
            raise NotAuthenticatedError()
        return self._current

    def on_end(self, hook: Callable[[], None]) -> None:
        """Register a callback run when the session ends (logout/shutdown)."""
        self._teardown_hooks.append(hook)

    def start(self, session: UserSession) -> None:
        """Install a session issued by the external authentication collaborator."""
        if self._current is not None and self._current.user_id != session.user_id:
            self.end()
        self._current = session
        self._log.step_complete(Activity.AUTH, "Session started", user=session.username, role=session.role)

    async def login(self, username: str, password: str, role: str) -> UserSession:
        """Authenticate against the farm API and start the session.

        The role returned by the farm API must match the requested one.
        Rejected credentials surface the farm API's message; an unreachable
        farm API surfaces as invalid credentials.
        """
        if self._auth_gateway is None:
            raise AuthenticationFailedError("Login is not available")

        try:
            with self._log.timed_step(Activity.AUTH, "Logging in", user=username, role=role):
                session = await self._auth_gateway.login(username, password, role)
        except FarmApiError as e:
            raise AuthenticationFailedError(INVALID_CREDENTIALS) from e
        if session.role != role:
            logger.info("Role mismatch for %s: requested %s, got %s", username, role, session.role)
            raise AuthenticationFailedError(f"User is not registered as {role}")

        self.start(session)
        return session

    def end(self) -> None:
        """Log out: tear down every module bound to this session."""
        for hook in self._teardown_hooks:
            hook()
        if self._current is not None:
            self._log.step_complete(Activity.AUTH, "Session ended", user=self._current.username)
        self._current = None
