"""Abstract gateway interface (port) for farm API authentication and users."""

from abc import ABC, abstractmethod
from typing import Any

from dairy_dashboard.domain.entities import UserSession


class AuthGateway(ABC):
    """Port for login and the user directory."""

    @abstractmethod
    async def login(self, username: str, password: str, role: str) -> UserSession:
        """Exchange credentials for a session token."""
        ...

    @abstractmethod
    async def list_users(self, *, token: str) -> list[dict[str, Any]]:
        """Return every user visible to the caller."""
        ...
