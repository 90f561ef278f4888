"""Unit tests for the EntityCatalog — YAML parsing, validation and lookup."""

import textwrap
from pathlib import Path

import pytest

from dairy_dashboard.application.services import CatalogError, EntityCatalog
from dairy_dashboard.config import Settings
from dairy_dashboard.domain.entities import ExportStrategy, FieldKind
from dairy_dashboard.domain.exceptions import EntityNotFoundError

from fakes import make_definition


# ── Fixtures ──


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    path = tmp_path / "entities.yaml"
    path.write_text(
        textwrap.dedent(
            """\
            entities:
              - slug: calf-records
                title: Calf Records
                resource: /calf-records/
                fields:
                  - {name: calf_id, required: true}
                  - {name: date, kind: date, default: today}
                  - {name: type, kind: choice, choices: [Vaccine, Dewormer]}
                  - {name: dose, kind: number}
                search_fields: [calf_id]
                date_field: date
                categorical_filters:
                  - {field: type, sentinel: ""}
                totals: [dose]
                order_by: ["-date", "-id"]
                export: client
                export_sheet: Calf Records
                actions:
                  - {name: close, path: /close/, method: patch, fields: [type]}
            """
        ),
        encoding="utf-8",
    )
    return path


# ── Loading ──


def test_from_yaml_builds_definitions(catalog_file):
    catalog = EntityCatalog.from_yaml(catalog_file)

    definition = catalog.get("calf-records")
    assert definition.resource == "calf-records"
    assert definition.export == ExportStrategy.CLIENT
    assert definition.export_name == "calf_records"
    assert [f.name for f in definition.fields] == ["calf_id", "date", "type", "dose"]
    assert definition.get_field("calf_id").label == "Calf Id"
    assert definition.get_field("dose").kind == FieldKind.NUMBER
    assert definition.required_fields == ["calf_id"]
    assert definition.get_filter("type").sentinel == ""
    assert definition.get_filter("type").label == "Type"


def test_actions_are_normalised(catalog_file):
    action = EntityCatalog.from_yaml(catalog_file).get("calf-records").get_action("close")

    assert action.path == "close"
    assert action.method == "PATCH"
    assert action.label == "Close"


def test_empty_file_is_an_empty_catalog(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert len(EntityCatalog.from_yaml(path)) == 0


@pytest.mark.parametrize(
    "entry, message",
    [
        ("- {title: No slug, resource: x}", "needs 'slug'"),
        ("- {slug: a, resource: a, fields: [{name: f, kind: money}]}", "Invalid field"),
        ("- {slug: a, resource: a, export: pdf}", "Invalid field"),
        ("- {slug: a, resource: a, search_fields: [ghost]}", "search_fields"),
        ("- {slug: a, resource: a, totals: [ghost]}", "totals"),
        ("- {slug: a, resource: a, order_by: ['-ghost']}", "order_by"),
        ("- {slug: a, resource: a, date_field: ghost}", "date_field"),
        ("- {slug: a, resource: a, id_field: ghost}", "id_field"),
        ("- {slug: a, resource: a, categorical_filters: [{field: ghost}]}", "categorical_filters"),
    ],
)
def test_malformed_entries_fail_fast(tmp_path, entry, message):
    path = tmp_path / "bad.yaml"
    path.write_text(f"entities:\n  {entry}\n", encoding="utf-8")

    with pytest.raises(CatalogError, match=message):
        EntityCatalog.from_yaml(path)


def test_implicit_fields_may_be_referenced(tmp_path):
    path = tmp_path / "implicit.yaml"
    path.write_text(
        "entities:\n  - {slug: a, resource: a, date_field: created_at, order_by: ['-id']}\n",
        encoding="utf-8",
    )

    assert EntityCatalog.from_yaml(path).get("a").date_field == "created_at"


# ── Registry ──


def test_duplicate_slug_rejected():
    catalog = EntityCatalog([make_definition()])

    with pytest.raises(CatalogError, match="Duplicate"):
        catalog.register(make_definition())


def test_action_fields_are_validated():
    definition = make_definition()
    definition.actions[0].copy_fields = ["ghost"]

    with pytest.raises(CatalogError, match="action 'approve'"):
        EntityCatalog([definition])


def test_unknown_slug_raises_not_found():
    catalog = EntityCatalog([make_definition()])

    with pytest.raises(EntityNotFoundError):
        catalog.get("unknown")
    assert "medicine-records" in catalog
    assert "unknown" not in catalog


def test_all_is_sorted_by_title():
    catalog = EntityCatalog(
        [
            make_definition(slug="b", title="Vaccines"),
            make_definition(slug="a", title="Calves"),
        ]
    )

    assert [d.slug for d in catalog.all()] == ["a", "b"]


# ── Bundled catalog ──


def test_bundled_catalog_loads():
    catalog = EntityCatalog.from_yaml(Settings().entity_catalog_file)

    assert len(catalog) == 47
    medicine = catalog.get("medicine-records")
    assert medicine.resource == "health-medicine-records"
    assert medicine.order_by == ["-date", "-created_at"]
    assert catalog.get("calf-records").export == ExportStrategy.CLIENT
    assert catalog.get("medicine-inventory").nullable_date is True
    assert catalog.get("feed-tracking").server_filters is True


@pytest.mark.parametrize(
    "slug, resource",
    [
        ("daily-attendance", "sa-daily-attendance"),
        ("weekly-shift-schedule", "sa-weekly-shift"),
        ("monthly-performance", "sa-monthly-performance"),
        ("staff-absences", "staff/attendance/absent"),
        ("financial-records", "financial-records"),
        ("monthly-expense", "fr-monthly-expense"),
        ("monthly-income", "fr-monthly-income"),
        ("vaccination-records", "health-vaccination-records"),
        ("vaccination-summary", "vaccination-summary"),
        ("calving-records", "breeding-calving-records"),
        ("breeding-summary", "breeding-summary"),
        ("weekly-yield-tracking", "myt-weekly-tracking"),
        ("weekly-yield-summary", "myt-weekly-summary"),
        ("monthly-yield-summary", "myt-milk-yield/monthly-summary"),
        ("feed-weekly-summary", "ft-weekly-summary"),
        ("feed-stock-register", "feed-water-observations"),
        ("audit-checklists", "rm-audit-checklists"),
        ("health-summary", "health-summary"),
        ("animals", "animals"),
    ],
)
def test_bundled_catalog_covers_every_record_family(slug, resource):
    catalog = EntityCatalog.from_yaml(Settings().entity_catalog_file)

    assert catalog.get(slug).resource == resource


def test_bundled_summaries_are_read_only_and_server_filtered():
    catalog = EntityCatalog.from_yaml(Settings().entity_catalog_file)

    for slug in ("financial-records", "monthly-expense", "health-summary", "breeding-summary"):
        definition = catalog.get(slug)
        assert definition.editable_fields == []
        assert definition.server_filters is True
        assert definition.date_field == "month"


def test_bundled_special_cases():
    catalog = EntityCatalog.from_yaml(Settings().entity_catalog_file)

    animals = catalog.get("animals")
    assert animals.id_field == "animal_id"
    assert animals.admin_can_create is True
    monthly = catalog.get("monthly-yield-summary")
    assert monthly.export_resource == "myt-monthly-summary"
    assert catalog.get("medicine-records").export_resource == "health-medicine-records"
    assert catalog.get("weekly-yield-summary").get_filter("week_number").sentinel == ""
    mark_out = catalog.get("daily-attendance").get_action("mark-out")
    assert mark_out.method == "PATCH"
    assert mark_out.path == "mark-out"
    assert catalog.get("staff-absences").get_filter("leave_type").choices == ["Sick", "Casual"]


def test_bundled_purchase_approvals_actions():
    definition = EntityCatalog.from_yaml(Settings().entity_catalog_file).get("purchase-approvals")

    approve = definition.get_action("approve")
    reject = definition.get_action("reject")
    assert approve.method == "PATCH"
    assert approve.payload == {"approval_status": "A"}
    assert approve.copy_fields == ["quantity"]
    assert reject.payload == {"approval_status": "R"}
    assert definition.get_filter("approval_status").choices == ["P", "A", "R"]
