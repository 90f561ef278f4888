"""Pydantic DTOs for record module views, forms and actions."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from dairy_dashboard.domain.entities import (
    FilterState,
    FormDraft,
    Record,
    RecordListView,
    SubmissionOutcome,
    ViewError,
)


class RecordSchema(BaseModel):
    """One farm record, flattened the way the farm API sent it."""

    id: int | str
    created_at: str | None = None
    owner: str | None = None
    data: dict[str, Any]

    @classmethod
    def from_record(cls, record: Record) -> "RecordSchema":
        return cls(
            id=record.id,
            created_at=record.created_at,
            owner=record.owner_name,
            data=record.data,
        )


class ViewErrorSchema(BaseModel):
    kind: str
    message: str
    retryable: bool

    @classmethod
    def from_error(cls, error: ViewError | None) -> "ViewErrorSchema | None":
        if error is None:
            return None
        return cls(kind=error.kind.value, message=error.message, retryable=error.retryable)


class FilterStateSchema(BaseModel):
    search: str = ""
    start_date: str | None = None
    end_date: str | None = None
    categories: dict[str, str] = {}

    @classmethod
    def from_state(cls, state: FilterState) -> "FilterStateSchema":
        return cls(
            search=state.search_term,
            start_date=state.start_date.isoformat() if state.start_date else None,
            end_date=state.end_date.isoformat() if state.end_date else None,
            categories=dict(state.categories),
        )


class FormDraftSchema(BaseModel):
    editing_id: int | str | None = None
    values: dict[str, Any]

    @classmethod
    def from_draft(cls, draft: FormDraft | None) -> "FormDraftSchema | None":
        if draft is None:
            return None
        return cls(editing_id=draft.editing_id, values=dict(draft.values))


class RecordListViewSchema(BaseModel):
    """Snapshot of one record module as the dashboard renders it."""

    module: str
    scope: str
    rows: list[RecordSchema]
    totals: dict[str, Decimal]
    total_count: int
    visible_count: int
    empty: bool
    filters: FilterStateSchema
    loading: bool
    error: ViewErrorSchema | None = None
    exporting: bool
    export_error: str | None = None
    submitting: bool
    deleting_id: int | str | None = None
    form: FormDraftSchema | None = None

    @classmethod
    def from_view(
        cls, module: str, scope: str, view: RecordListView, draft: FormDraft | None = None
    ) -> "RecordListViewSchema":
        return cls(
            module=module,
            scope=scope,
            rows=[RecordSchema.from_record(r) for r in view.rows],
            totals=view.totals,
            total_count=view.total_count,
            visible_count=view.visible_count,
            empty=view.is_empty,
            filters=FilterStateSchema.from_state(view.filters),
            loading=view.loading,
            error=ViewErrorSchema.from_error(view.error),
            exporting=view.exporting,
            export_error=view.export_error,
            submitting=view.submitting,
            deleting_id=view.deleting_id,
            form=FormDraftSchema.from_draft(draft),
        )


class FormUpdateRequest(BaseModel):
    """Partial form input; unknown fields are ignored."""

    values: dict[str, Any] = Field(..., examples=[{"animal_id": "C-102", "dosage": "10ml"}])


class SubmissionResponse(BaseModel):
    status: str
    ok: bool
    error: ViewErrorSchema | None = None
    form: FormDraftSchema | None = None

    @classmethod
    def from_outcome(
        cls, outcome: SubmissionOutcome, draft: FormDraft | None
    ) -> "SubmissionResponse":
        return cls(
            status=outcome.status.value,
            ok=outcome.ok,
            error=ViewErrorSchema.from_error(outcome.error),
            form=FormDraftSchema.from_draft(draft),
        )


class DeleteResponse(BaseModel):
    deleted: bool
    error: ViewErrorSchema | None = None


class RecordActionRequest(BaseModel):
    """Values for a record action, e.g. ``{"approver_remarks": "ok"}``."""

    values: dict[str, Any] = {}


class RecordActionResponse(BaseModel):
    ok: bool
    error: ViewErrorSchema | None = None
