"""Domain entities describing a record module — one per farm record type.

An EntityDefinition is everything the generic record engine needs to
know about a record type: where it lives on the farm API, which fields
it has, how to search, filter, sort, total and export it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

ALL_SENTINEL = "All"


class FieldKind(str, Enum):
    """Value kinds a record field can hold."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    CHOICE = "choice"
    BOOLEAN = "boolean"


class ExportStrategy(str, Enum):
    """How a module produces its spreadsheet."""

    SERVER = "server"  # farm API builds the workbook
    CLIENT = "client"  # built locally from the visible rows


@dataclass
class FieldDefinition:
    """One field of a record type."""

    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    choices: list[str] = field(default_factory=list)
    default: Any = None
    editable: bool = True
    hidden: bool = False


@dataclass
class CategoricalFilter:
    """An equality filter over one field, with a 'no constraint' sentinel."""

    field: str
    label: str
    choices: list[str] = field(default_factory=list)
    sentinel: str = ALL_SENTINEL

    def is_active(self, value: str | None) -> bool:
        return value is not None and value not in ("", self.sentinel, ALL_SENTINEL)


@dataclass
class RecordAction:
    """A named server-side action on one record (e.g. approve / reject).

    ``payload`` holds constant values sent with the action; ``fields``
    names the values the caller must supply; ``copy_fields`` are copied
    from the record itself (e.g. the approved quantity).
    """

    name: str
    label: str
    path: str
    payload: dict[str, Any] = field(default_factory=dict)
    fields: list[str] = field(default_factory=list)
    actor_field: str | None = None
    method: str = "POST"
    copy_fields: list[str] = field(default_factory=list)


@dataclass
class EntityDefinition:
    """Configuration of one generic record module."""

    slug: str
    title: str
    resource: str
    fields: list[FieldDefinition] = field(default_factory=list)
    search_fields: list[str] = field(default_factory=list)
    date_field: str | None = None
    nullable_date: bool = False
    categorical_filters: list[CategoricalFilter] = field(default_factory=list)
    totals: list[str] = field(default_factory=list)
    order_by: list[str] = field(default_factory=list)
    export: ExportStrategy = ExportStrategy.SERVER
    export_name: str = ""
    export_sheet: str = ""
    export_columns: list[str] = field(default_factory=list)
    export_resource: str = ""
    id_field: str = "id"
    server_filters: bool = False
    admin_can_create: bool = False
    actions: list[RecordAction] = field(default_factory=list)
    description: str = ""

    def __post_init__(self) -> None:
        if not self.export_name:
            self.export_name = self.slug.replace("-", "_")
        if not self.export_sheet:
            self.export_sheet = self.title
        if not self.export_resource:
            self.export_resource = self.resource

    def get_field(self, name: str) -> FieldDefinition | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_filter(self, field_name: str) -> CategoricalFilter | None:
        for cf in self.categorical_filters:
            if cf.field == field_name:
                return cf
        return None

    def get_action(self, name: str) -> RecordAction | None:
        for action in self.actions:
            if action.name == name:
                return action
        return None

    @property
    def editable_fields(self) -> list[FieldDefinition]:
        return [f for f in self.fields if f.editable]

    @property
    def required_fields(self) -> list[str]:
        return [f.name for f in self.fields if f.required and f.editable]

    @property
    def columns(self) -> list[FieldDefinition]:
        """Fields shown in tables and client-built exports, in order."""
        if self.export_columns:
            selected = [self.get_field(name) for name in self.export_columns]
            return [f for f in selected if f is not None]
        return [f for f in self.fields if not f.hidden]
