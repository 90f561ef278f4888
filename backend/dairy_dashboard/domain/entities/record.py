"""Domain entity — one record of a farm collection as returned by the farm API."""

from dataclasses import dataclass, field
from typing import Any

_RESERVED_KEYS = frozenset({"id", "created_at", "user", "supervisor"})


@dataclass
class Record:
    """A single farm record.

    ``data`` keeps every entity-specific field exactly as received.
    ``id`` and ``created_at`` are server-assigned and never changed locally.
    """

    id: int | str
    data: dict[str, Any] = field(default_factory=dict)
    created_at: str | None = None
    owner: Any = None

    @classmethod
    def from_api(cls, payload: dict[str, Any], id_field: str = "id") -> "Record":
        """Build a Record from a farm API JSON object.

        ``id_field`` names the key the farm API addresses the record by;
        animals, for instance, are keyed by their ``animal_id``.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Farm API record is not an object: {payload!r}")
        if id_field not in payload:
            raise ValueError(f"Farm API record is missing its '{id_field}'")
        data = {k: v for k, v in payload.items() if k not in _RESERVED_KEYS}
        owner = payload.get("user", payload.get("supervisor"))
        return cls(
            id=payload[id_field],
            data=data,
            created_at=payload.get("created_at"),
            owner=owner,
        )

    def get(self, field_name: str, default: Any = None) -> Any:
        """Return a field value; ``id`` and ``created_at`` are addressable too."""
        if field_name == "id":
            return self.id
        if field_name == "created_at":
            return self.created_at
        return self.data.get(field_name, default)

    @property
    def owner_name(self) -> str | None:
        """Username of the owning user when the farm API nests it."""
        if isinstance(self.owner, dict):
            return self.owner.get("username")
        return None

    def to_dict(self) -> dict[str, Any]:
        """Flat dict representation (the shape the farm API sent)."""
        result: dict[str, Any] = {"id": self.id, **self.data}
        if self.created_at is not None:
            result["created_at"] = self.created_at
        if self.owner is not None:
            result["user"] = self.owner
        return result
