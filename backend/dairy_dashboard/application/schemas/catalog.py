"""Pydantic schemas for entity catalog API responses."""

from typing import Any

from pydantic import BaseModel

from dairy_dashboard.domain.entities import EntityDefinition


class FieldSchema(BaseModel):
    name: str
    label: str
    kind: str
    required: bool
    choices: list[str] = []
    default: Any = None
    editable: bool
    hidden: bool


class CategoricalFilterSchema(BaseModel):
    field: str
    label: str
    choices: list[str] = []
    sentinel: str


class RecordActionSchema(BaseModel):
    name: str
    label: str
    fields: list[str] = []


class EntitySummarySchema(BaseModel):
    slug: str
    title: str
    description: str
    export: str


class EntityDefinitionSchema(BaseModel):
    """Everything a client needs to render one record module."""

    slug: str
    title: str
    description: str
    fields: list[FieldSchema]
    search_fields: list[str]
    date_field: str | None = None
    categorical_filters: list[CategoricalFilterSchema]
    totals: list[str]
    export: str
    admin_can_create: bool
    actions: list[RecordActionSchema]

    @classmethod
    def from_definition(cls, d: EntityDefinition) -> "EntityDefinitionSchema":
        return cls(
            slug=d.slug,
            title=d.title,
            description=d.description,
            fields=[
                FieldSchema(
                    name=f.name,
                    label=f.label,
                    kind=f.kind.value,
                    required=f.required,
                    choices=f.choices,
                    default=f.default,
                    editable=f.editable,
                    hidden=f.hidden,
                )
                for f in d.fields
            ],
            search_fields=d.search_fields,
            date_field=d.date_field,
            categorical_filters=[
                CategoricalFilterSchema(
                    field=c.field, label=c.label, choices=c.choices, sentinel=c.sentinel
                )
                for c in d.categorical_filters
            ],
            totals=d.totals,
            export=d.export.value,
            admin_can_create=d.admin_can_create,
            actions=[
                RecordActionSchema(name=a.name, label=a.label, fields=a.fields)
                for a in d.actions
            ],
        )
