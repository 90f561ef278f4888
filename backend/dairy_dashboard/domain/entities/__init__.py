from .entity_definition import (
    ALL_SENTINEL,
    CategoricalFilter,
    EntityDefinition,
    ExportStrategy,
    FieldDefinition,
    FieldKind,
    RecordAction,
)
from .filter_state import FilterState
from .form_draft import FormDraft
from .record import Record
from .session import ADMIN_ROLE, SUPERVISOR_ROLE, ScopeQuery, UserSession
from .view import (
    XLSX_MEDIA_TYPE,
    ErrorKind,
    ExportFile,
    RecordListView,
    SubmissionOutcome,
    SubmissionStatus,
    ViewError,
)

__all__ = [
    "ALL_SENTINEL",
    "CategoricalFilter",
    "EntityDefinition",
    "ExportStrategy",
    "FieldDefinition",
    "FieldKind",
    "RecordAction",
    "FilterState",
    "FormDraft",
    "Record",
    "ADMIN_ROLE",
    "SUPERVISOR_ROLE",
    "ScopeQuery",
    "UserSession",
    "XLSX_MEDIA_TYPE",
    "ErrorKind",
    "ExportFile",
    "RecordListView",
    "SubmissionOutcome",
    "SubmissionStatus",
    "ViewError",
]
