"""Abstract gateway interface (port) for farm record collections."""

from abc import ABC, abstractmethod
from typing import Any


class RecordGateway(ABC):
    """Port for the farm REST API record endpoints — implemented in infrastructure.

    Implementations raise ``AuthenticationFailedError`` on 401,
    ``RecordNotFoundError`` on 404, ``RecordValidationError`` for rejected
    writes carrying a field-error payload, and ``FarmApiError`` for every
    other failure (``status_code=None`` for transport errors).
    """

    @abstractmethod
    async def list_records(
        self, resource: str, *, token: str, params: dict[str, str] | None = None
    ) -> list[dict[str, Any]]:
        """GET the whole collection, optionally narrowed by query parameters."""
        ...

    @abstractmethod
    async def create_record(
        self, resource: str, payload: dict[str, Any], *, token: str
    ) -> dict[str, Any]:
        """POST a new record."""
        ...

    @abstractmethod
    async def update_record(
        self, resource: str, record_id: int | str, payload: dict[str, Any], *, token: str
    ) -> dict[str, Any]:
        """PUT a full replacement of an existing record."""
        ...

    @abstractmethod
    async def delete_record(self, resource: str, record_id: int | str, *, token: str) -> None:
        """DELETE one record."""
        ...

    @abstractmethod
    async def export_records(
        self, resource: str, *, token: str, params: dict[str, str] | None = None
    ) -> bytes:
        """GET the server-generated spreadsheet for the filtered collection."""
        ...

    @abstractmethod
    async def perform_action(
        self,
        resource: str,
        record_id: int | str,
        action_path: str,
        payload: dict[str, Any],
        *,
        token: str,
        method: str = "POST",
    ) -> dict[str, Any]:
        """Send a named action (e.g. approve-reject) for one record."""
        ...
