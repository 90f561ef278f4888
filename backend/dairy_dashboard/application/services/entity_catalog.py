"""Entity catalog — parses the YAML definitions of every record module.

Loaded once at application startup via the FastAPI lifespan. Each entry
under ``entities:`` becomes an EntityDefinition; references between its
parts (search fields, date field, filters, totals, sort keys, export
columns) are checked against the declared fields.
"""

import logging
from pathlib import Path

import yaml

from dairy_dashboard.domain.entities import (
    ALL_SENTINEL,
    CategoricalFilter,
    EntityDefinition,
    ExportStrategy,
    FieldDefinition,
    FieldKind,
    RecordAction,
)
from dairy_dashboard.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)

# Fields every record carries without declaring them
_IMPLICIT_FIELDS = frozenset({"id", "created_at"})


class CatalogError(ValueError):
    """Raised when an entity definition is malformed."""


class EntityCatalog:
    """In-memory registry of entity definitions, keyed by slug."""

    def __init__(self, definitions: list[EntityDefinition] | None = None):
        self._definitions: dict[str, EntityDefinition] = {}
        for definition in definitions or []:
            self.register(definition)

    # ── Loading ─────────────────────────────────────────────────────

    @classmethod
    def from_yaml(cls, path: str | Path) -> "EntityCatalog":
        """Parse a catalog file. Raises CatalogError on invalid entries."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        catalog = cls()
        for entry in data.get("entities", []):
            catalog.register(cls._build_definition(entry))
        logger.info("Loaded %d entity definitions from %s", len(catalog), path.name)
        return catalog

    @staticmethod
    def _build_definition(entry: dict) -> EntityDefinition:
        """Map a raw YAML dict to an EntityDefinition domain entity."""
        if "slug" not in entry or "resource" not in entry:
            raise CatalogError(f"Entity entry needs 'slug' and 'resource': {entry!r}")

        try:
            fields = [
                FieldDefinition(
                    name=f["name"],
                    label=f.get("label", f["name"].replace("_", " ").title()),
                    kind=FieldKind(f.get("kind", "text")),
                    required=f.get("required", False),
                    choices=[str(c) for c in f.get("choices", [])],
                    default=f.get("default"),
                    editable=f.get("editable", True),
                    hidden=f.get("hidden", False),
                )
                for f in entry.get("fields", [])
            ]
            export = ExportStrategy(entry.get("export", "server"))
        except (KeyError, ValueError) as e:
            raise CatalogError(f"Invalid field in entity '{entry['slug']}': {e}") from e

        categorical_filters = [
            CategoricalFilter(
                field=c["field"],
                label=c.get("label", c["field"].replace("_", " ").title()),
                choices=[str(v) for v in c.get("choices", [])],
                sentinel=c.get("sentinel", ALL_SENTINEL),
            )
            for c in entry.get("categorical_filters", [])
        ]

        actions = [
            RecordAction(
                name=a["name"],
                label=a.get("label", a["name"].title()),
                path=a["path"].strip("/"),
                payload=dict(a.get("payload", {})),
                fields=list(a.get("fields", [])),
                actor_field=a.get("actor_field"),
                method=a.get("method", "POST").upper(),
                copy_fields=list(a.get("copy_fields", [])),
            )
            for a in entry.get("actions", [])
        ]

        return EntityDefinition(
            slug=entry["slug"],
            title=entry.get("title", entry["slug"]),
            resource=entry["resource"].strip("/"),
            fields=fields,
            search_fields=list(entry.get("search_fields", [])),
            date_field=entry.get("date_field"),
            nullable_date=entry.get("nullable_date", False),
            categorical_filters=categorical_filters,
            totals=list(entry.get("totals", [])),
            order_by=list(entry.get("order_by", [])),
            export=export,
            export_name=entry.get("export_name", ""),
            export_sheet=entry.get("export_sheet", ""),
            export_columns=list(entry.get("export_columns", [])),
            export_resource=entry.get("export_resource", "").strip("/"),
            id_field=entry.get("id_field", "id"),
            server_filters=entry.get("server_filters", False),
            admin_can_create=entry.get("admin_can_create", False),
            actions=actions,
            description=entry.get("description", "").strip(),
        )

    # ── Registry ────────────────────────────────────────────────────

    def register(self, definition: EntityDefinition) -> None:
        if definition.slug in self._definitions:
            raise CatalogError(f"Duplicate entity slug '{definition.slug}'")
        _validate(definition)
        self._definitions[definition.slug] = definition

    def get(self, slug: str) -> EntityDefinition:
        definition = self._definitions.get(slug)
        if definition is None:
            raise EntityNotFoundError("EntityDefinition", slug)
        return definition

    def all(self) -> list[EntityDefinition]:
        return sorted(self._definitions.values(), key=lambda d: d.title)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, slug: object) -> bool:
        return slug in self._definitions


def _validate(definition: EntityDefinition) -> None:
    known = {f.name for f in definition.fields} | _IMPLICIT_FIELDS

    def check(names: list[str], what: str) -> None:
        unknown = [n for n in names if n not in known]
        if unknown:
            raise CatalogError(
                f"Entity '{definition.slug}' {what} references unknown fields: {', '.join(unknown)}"
            )

    check(definition.search_fields, "search_fields")
    check(definition.totals, "totals")
    check([key.lstrip("-") for key in definition.order_by], "order_by")
    check(definition.export_columns, "export_columns")
    check([c.field for c in definition.categorical_filters], "categorical_filters")
    if definition.date_field:
        check([definition.date_field], "date_field")
    check([definition.id_field], "id_field")
    for action in definition.actions:
        check(action.fields + action.copy_fields, f"action '{action.name}'")
