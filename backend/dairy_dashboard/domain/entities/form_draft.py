"""Domain entity — the in-progress create/edit buffer of a record form."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .entity_definition import EntityDefinition, FieldKind
from .record import Record

TODAY = "today"
NOW_TIME = "now_time"


@dataclass
class FormDraft:
    """Editable values of one record, plus the id being edited (if any)."""

    values: dict[str, Any] = field(default_factory=dict)
    editing_id: int | str | None = None

    @property
    def is_edit(self) -> bool:
        return self.editing_id is not None

    @classmethod
    def empty(cls, definition: EntityDefinition, now: datetime | None = None) -> "FormDraft":
        """A new draft with every editable field at its default."""
        now = now or datetime.now()
        values = {
            f.name: _resolve_default(f.default, f.kind, now)
            for f in definition.editable_fields
        }
        return cls(values=values)

    @classmethod
    def from_record(cls, definition: EntityDefinition, record: Record) -> "FormDraft":
        """A draft seeded from an existing record's editable fields."""
        values: dict[str, Any] = {}
        for f in definition.editable_fields:
            value = record.get(f.name)
            if f.kind == FieldKind.DATE and isinstance(value, str):
                value = value.split("T")[0]
            values[f.name] = "" if value is None else value
        return cls(values=values, editing_id=record.id)

    def update(self, values: dict[str, Any]) -> None:
        self.values.update(values)

    def missing_required(self, definition: EntityDefinition) -> list[str]:
        """Names of required fields left empty — the only local validation."""
        missing = []
        for name in definition.required_fields:
            value = self.values.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing


def _resolve_default(default: Any, kind: FieldKind, now: datetime) -> Any:
    if default == TODAY:
        return now.date().isoformat()
    if default == NOW_TIME:
        return now.strftime("%H:%M")
    if default is None:
        return False if kind == FieldKind.BOOLEAN else ""
    return default
