"""Supervisor directory — the admin's picker for the ownership scope."""

from typing import Any

from dairy_dashboard.application.interfaces import AuthGateway
from dairy_dashboard.application.services.session_context import SessionContext
from dairy_dashboard.domain.entities import SUPERVISOR_ROLE
from dairy_dashboard.domain.exceptions import PermissionDeniedError


class SupervisorDirectory:
    def __init__(self, auth_gateway: AuthGateway, session: SessionContext):
        self._auth_gateway = auth_gateway
        self._session = session

    async def list_supervisors(self, search: str = "") -> list[dict[str, Any]]:
        """Supervisors known to the farm API, optionally filtered by username/email."""
        session = self._session.require()
        if not session.is_admin:
            raise PermissionDeniedError("Only admins can list supervisors")

        users = await self._auth_gateway.list_users(token=session.token)
        supervisors = [u for u in users if u.get("role") == SUPERVISOR_ROLE]
        if not search:
            return supervisors

        needle = search.lower()
        return [
            u for u in supervisors
            if needle in str(u.get("username") or "").lower()
            or needle in str(u.get("email") or "").lower()
        ]
