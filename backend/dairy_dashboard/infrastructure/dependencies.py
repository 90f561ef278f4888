"""FastAPI dependency injection — wires infrastructure to application layer.

The dashboard keeps one session and one workspace per process, so every
provider here returns a cached singleton. Tests replace them through
``app.dependency_overrides``.
"""

from functools import lru_cache

from dairy_dashboard.config import get_settings
from dairy_dashboard.application.services import (
    DashboardWorkspace,
    EntityCatalog,
    ExportService,
    SessionContext,
    SupervisorDirectory,
)
from dairy_dashboard.infrastructure.export import OpenpyxlSpreadsheetWriter
from dairy_dashboard.infrastructure.farm_api import FarmApiClient


@lru_cache
def get_entity_catalog() -> EntityCatalog:
    """Entity catalog parsed from the configured YAML file."""
    return EntityCatalog.from_yaml(get_settings().entity_catalog_file)


@lru_cache
def get_farm_api_client() -> FarmApiClient:
    settings = get_settings()
    return FarmApiClient(
        base_url=settings.farm_api_base_url,
        timeout=settings.farm_api_timeout,
    )


@lru_cache
def get_session_context() -> SessionContext:
    return SessionContext(auth_gateway=get_farm_api_client())


@lru_cache
def get_workspace() -> DashboardWorkspace:
    """Registry of mounted record modules, torn down when the session ends."""
    return DashboardWorkspace(
        catalog=get_entity_catalog(),
        gateway=get_farm_api_client(),
        session=get_session_context(),
    )


@lru_cache
def get_export_service() -> ExportService:
    return ExportService(
        gateway=get_farm_api_client(),
        writer=OpenpyxlSpreadsheetWriter(),
        session=get_session_context(),
    )


@lru_cache
def get_supervisor_directory() -> SupervisorDirectory:
    return SupervisorDirectory(
        auth_gateway=get_farm_api_client(),
        session=get_session_context(),
    )
