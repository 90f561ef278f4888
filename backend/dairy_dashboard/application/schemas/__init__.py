from .catalog import (
    CategoricalFilterSchema,
    EntityDefinitionSchema,
    EntitySummarySchema,
    FieldSchema,
    RecordActionSchema,
)
from .records import (
    DeleteResponse,
    FilterStateSchema,
    FormDraftSchema,
    FormUpdateRequest,
    RecordActionRequest,
    RecordActionResponse,
    RecordListViewSchema,
    RecordSchema,
    SubmissionResponse,
    ViewErrorSchema,
)
from .session import LoginRequest, SessionResponse, SupervisorSchema

__all__ = [
    "CategoricalFilterSchema",
    "EntityDefinitionSchema",
    "EntitySummarySchema",
    "FieldSchema",
    "RecordActionSchema",
    "DeleteResponse",
    "FilterStateSchema",
    "FormDraftSchema",
    "FormUpdateRequest",
    "RecordActionRequest",
    "RecordActionResponse",
    "RecordListViewSchema",
    "RecordSchema",
    "SubmissionResponse",
    "ViewErrorSchema",
    "LoginRequest",
    "SessionResponse",
    "SupervisorSchema",
]
