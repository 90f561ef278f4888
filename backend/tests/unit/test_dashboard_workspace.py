"""Unit tests for DashboardWorkspace — mounting, scope changes and teardown."""

import pytest

from dairy_dashboard.application.services import DashboardWorkspace, EntityCatalog
from dairy_dashboard.domain.entities import FilterState, ScopeQuery
from dairy_dashboard.domain.exceptions import EntityNotFoundError

from fakes import make_definition


@pytest.fixture
def catalog() -> EntityCatalog:
    return EntityCatalog([make_definition()])


@pytest.mark.asyncio
async def test_mount_fetches_once_and_reuses_module(catalog, gateway, session):
    workspace = DashboardWorkspace(catalog, gateway, session)

    first = await workspace.mount("medicine-records")
    second = await workspace.mount("medicine-records")

    assert first is second
    assert len(first.controller.records) == 4
    assert len(gateway.calls_for("list")) == 1
    assert workspace.mounted == ["medicine-records"]


@pytest.mark.asyncio
async def test_mount_unknown_slug(catalog, gateway, session):
    workspace = DashboardWorkspace(catalog, gateway, session)

    with pytest.raises(EntityNotFoundError):
        await workspace.mount("unknown")


@pytest.mark.asyncio
async def test_admin_scope_change_remounts_and_refetches(catalog, gateway, admin_session):
    workspace = DashboardWorkspace(catalog, gateway, admin_session)

    everyone = await workspace.mount("medicine-records", ScopeQuery(all_supervisors=True))
    one = await workspace.mount("medicine-records", ScopeQuery(supervisor_id="7"))

    assert everyone is not one
    assert everyone.controller.is_mounted is False
    assert one.controller.scope == ScopeQuery(supervisor_id="7")
    params = [c[2] for c in gateway.calls_for("list")]
    assert params == [{"all_supervisors": "true"}, {"supervisorId": "7"}]


@pytest.mark.asyncio
async def test_non_admin_is_forced_to_own_scope(catalog, gateway, session):
    workspace = DashboardWorkspace(catalog, gateway, session)

    module = await workspace.mount("medicine-records", ScopeQuery(all_supervisors=True))

    assert module.controller.scope == ScopeQuery()
    assert gateway.calls_for("list")[0][2] == {}


@pytest.mark.asyncio
async def test_session_end_tears_down_every_module(catalog, gateway, session):
    workspace = DashboardWorkspace(catalog, gateway, session)
    module = await workspace.mount("medicine-records")
    module.form.open_new()

    session.end()

    assert workspace.mounted == []
    assert module.controller.is_mounted is False
    assert module.form.is_open is False
    assert workspace.get("medicine-records") is None


@pytest.mark.asyncio
async def test_unmount_single_module(catalog, gateway, session):
    workspace = DashboardWorkspace(catalog, gateway, session)
    module = await workspace.mount("medicine-records")

    workspace.unmount("medicine-records")
    workspace.unmount("medicine-records")

    assert module.controller.is_mounted is False
    assert workspace.mounted == []


@pytest.mark.asyncio
async def test_mount_seeds_filters_before_first_fetch(gateway, session):
    catalog = EntityCatalog([make_definition(server_filters=True)])
    workspace = DashboardWorkspace(catalog, gateway, session)

    module = await workspace.mount("medicine-records", filters=FilterState(search_term="cow"))

    assert module.controller.filters.search_term == "cow"
    assert gateway.calls_for("list")[0][2] == {"search": "cow"}
