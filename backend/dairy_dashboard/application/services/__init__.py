from .dashboard_workspace import DashboardWorkspace, RecordModule
from .entity_catalog import CatalogError, EntityCatalog
from .export_service import ExportService
from .form_submission import FormSubmissionFlow
from .record_list_controller import RecordListController
from .session_context import SessionContext
from .supervisor_directory import SupervisorDirectory

__all__ = [
    "DashboardWorkspace",
    "RecordModule",
    "CatalogError",
    "EntityCatalog",
    "ExportService",
    "FormSubmissionFlow",
    "RecordListController",
    "SessionContext",
    "SupervisorDirectory",
]
