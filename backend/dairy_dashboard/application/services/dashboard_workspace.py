"""Dashboard workspace — registry of the record modules currently mounted."""

import logging
from dataclasses import dataclass

from dairy_dashboard.application.interfaces import RecordGateway
from dairy_dashboard.application.services.entity_catalog import EntityCatalog
from dairy_dashboard.application.services.form_submission import FormSubmissionFlow
from dairy_dashboard.application.services.record_list_controller import RecordListController
from dairy_dashboard.application.services.session_context import SessionContext
from dairy_dashboard.domain.entities import FilterState, ScopeQuery

logger = logging.getLogger(__name__)


@dataclass
class RecordModule:
    """One mounted module: its list controller and form flow."""

    controller: RecordListController
    form: FormSubmissionFlow

    @property
    def slug(self) -> str:
        return self.controller.definition.slug


class DashboardWorkspace:
    """Keeps at most one module per entity, bound to one ownership scope.

    Non-admin users always get their own scope, whatever they ask for.
    Changing the scope of an entity unmounts the old module and mounts a
    fresh one, which fetches immediately. The whole workspace is torn
    down when the session ends.
    """

    def __init__(self, catalog: EntityCatalog, gateway: RecordGateway, session: SessionContext):
        self._catalog = catalog
        self._gateway = gateway
        self._session = session
        self._modules: dict[str, RecordModule] = {}
        session.on_end(self.teardown)

    @property
    def mounted(self) -> list[str]:
        return sorted(self._modules)

    async def mount(
        self, slug: str, scope: ScopeQuery | None = None, filters: FilterState | None = None
    ) -> RecordModule:
        """Return the module for ``(slug, scope)``, creating it if needed.

        ``filters`` only seed a newly created module, before its first fetch.
        """
        definition = self._catalog.get(slug)
        session = self._session.current
        if session is None or not session.is_admin:
            scope = ScopeQuery()
        scope = scope or ScopeQuery()

        module = self._modules.get(slug)
        if module is not None and module.controller.scope == scope:
            return module
        if module is not None:
            logger.info("Scope of %s changed %s → %s", slug, module.controller.scope.key, scope.key)
            self.unmount(slug)

        controller = RecordListController(definition, self._gateway, self._session, scope)
        module = RecordModule(
            controller=controller,
            form=FormSubmissionFlow(controller, self._gateway, self._session),
        )
        if filters is not None:
            controller.apply_filters(filters)
        self._modules[slug] = module
        await controller.fetch()
        return module

    def get(self, slug: str) -> RecordModule | None:
        return self._modules.get(slug)

    def unmount(self, slug: str) -> None:
        module = self._modules.pop(slug, None)
        if module is not None:
            module.form.cancel()
            module.controller.unmount()

    def teardown(self) -> None:
        """Unmount every module (logout / shutdown)."""
        for slug in list(self._modules):
            self.unmount(slug)
        logger.debug("Workspace torn down")
