"""Record modules API controller — catalog, views, forms, deletes, exports."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from dairy_dashboard.application.schemas import (
    DeleteResponse,
    EntityDefinitionSchema,
    EntitySummarySchema,
    FormDraftSchema,
    FormUpdateRequest,
    RecordActionRequest,
    RecordActionResponse,
    RecordListViewSchema,
    SubmissionResponse,
    ViewErrorSchema,
)
from dairy_dashboard.application.services import (
    DashboardWorkspace,
    EntityCatalog,
    ExportService,
    RecordModule,
    SessionContext,
)
from dairy_dashboard.application.services.record_list_controller import AUTH_FAILED
from dairy_dashboard.domain.entities import (
    EntityDefinition,
    ErrorKind,
    FilterState,
    ScopeQuery,
    SubmissionStatus,
    ViewError,
)
from dairy_dashboard.domain.exceptions import (
    EntityNotFoundError,
    NotAuthenticatedError,
    PermissionDeniedError,
    RecordNotFoundError,
)
from dairy_dashboard.infrastructure.dependencies import (
    get_entity_catalog,
    get_export_service,
    get_session_context,
    get_workspace,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/modules", tags=["Record Modules"])

# Query parameters of the view endpoint that are not categorical filters
_RESERVED_PARAMS = frozenset({"search", "start_date", "end_date", "supervisor", "refresh"})


# ── Helpers ──────────────────────────────────────────────────────────

def _require_session(session: SessionContext) -> None:
    try:
        session.require()
    except NotAuthenticatedError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)


def _get_definition(catalog: EntityCatalog, slug: str) -> EntityDefinition:
    try:
        return catalog.get(slug)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


async def _current_module(
    workspace: DashboardWorkspace, catalog: EntityCatalog, slug: str
) -> RecordModule:
    """The mounted module for ``slug``, mounting it with the default scope if needed."""
    _get_definition(catalog, slug)
    module = workspace.get(slug)
    if module is None:
        module = await workspace.mount(slug)
    return module


def _status_for(error: ViewError | None, session: SessionContext) -> int:
    """HTTP status reported alongside a module-level error."""
    if error is None:
        return status.HTTP_200_OK
    if error.kind == ErrorKind.AUTH:
        # signed in and token accepted: the role was refused
        if session.is_authenticated and error.message != AUTH_FAILED:
            return status.HTTP_403_FORBIDDEN
        return status.HTTP_401_UNAUTHORIZED
    if error.kind == ErrorKind.NOT_FOUND:
        return status.HTTP_404_NOT_FOUND
    if error.kind == ErrorKind.VALIDATION:
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_502_BAD_GATEWAY


def _filter_state(
    definition: EntityDefinition,
    request: Request,
    search: str,
    start_date: date | None,
    end_date: date | None,
) -> FilterState:
    categories = {
        key: value
        for key, value in request.query_params.items()
        if key not in _RESERVED_PARAMS and definition.get_filter(key) is not None
    }
    return FilterState(
        search_term=search.strip(),
        start_date=start_date,
        end_date=end_date,
        categories=categories,
    )


def _view(module: RecordModule) -> RecordListViewSchema:
    controller = module.controller
    return RecordListViewSchema.from_view(
        module=module.slug,
        scope=controller.scope.key,
        view=controller.view(),
        draft=module.form.draft,
    )


# ── Catalog ──────────────────────────────────────────────────────────

@router.get("", response_model=list[EntitySummarySchema])
async def list_modules(
    catalog: EntityCatalog = Depends(get_entity_catalog),
) -> list[EntitySummarySchema]:
    """Every record module the dashboard offers."""
    return [
        EntitySummarySchema(
            slug=d.slug, title=d.title, description=d.description, export=d.export.value
        )
        for d in catalog.all()
    ]


@router.get("/{slug}", response_model=EntityDefinitionSchema)
async def get_module(
    slug: str,
    catalog: EntityCatalog = Depends(get_entity_catalog),
) -> EntityDefinitionSchema:
    """Fields, filters and actions of one record module."""
    return EntityDefinitionSchema.from_definition(_get_definition(catalog, slug))


# ── View ─────────────────────────────────────────────────────────────

@router.get("/{slug}/records", response_model=RecordListViewSchema)
async def get_records(
    slug: str,
    request: Request,
    search: str = Query("", description="Free-text search"),
    start_date: date | None = Query(None, description="Inclusive lower date bound"),
    end_date: date | None = Query(None, description="Inclusive upper date bound"),
    supervisor: str | None = Query(None, description="Admins only: 'all' or a supervisor id"),
    refresh: bool = Query(False, description="Refetch from the farm API"),
    catalog: EntityCatalog = Depends(get_entity_catalog),
    workspace: DashboardWorkspace = Depends(get_workspace),
    session: SessionContext = Depends(get_session_context),
) -> RecordListViewSchema:
    """Mount the module (fetching on first access) and return its filtered view.

    Categorical filters are passed as one query parameter per filter field.
    """
    _require_session(session)
    definition = _get_definition(catalog, slug)

    state = _filter_state(definition, request, search, start_date, end_date)
    existing = workspace.get(slug)
    module = await workspace.mount(slug, ScopeQuery.parse(supervisor), filters=state)
    controller = module.controller
    if module is not existing:
        return _view(module)

    changed = state != controller.filters
    controller.apply_filters(state)
    if refresh or (definition.server_filters and changed):
        await controller.refetch()
    return _view(module)


@router.post("/{slug}/filters/clear", response_model=RecordListViewSchema)
async def clear_filters(
    slug: str,
    catalog: EntityCatalog = Depends(get_entity_catalog),
    workspace: DashboardWorkspace = Depends(get_workspace),
    session: SessionContext = Depends(get_session_context),
) -> RecordListViewSchema:
    _require_session(session)
    module = await _current_module(workspace, catalog, slug)
    module.controller.clear_filters()
    if module.controller.definition.server_filters:
        await module.controller.refetch()
    return _view(module)


@router.post("/{slug}/retry", response_model=RecordListViewSchema)
async def retry(
    slug: str,
    catalog: EntityCatalog = Depends(get_entity_catalog),
    workspace: DashboardWorkspace = Depends(get_workspace),
    session: SessionContext = Depends(get_session_context),
) -> RecordListViewSchema:
    """Manual recovery after an error banner."""
    _require_session(session)
    module = await _current_module(workspace, catalog, slug)
    await module.controller.retry()
    return _view(module)


# ── Form ─────────────────────────────────────────────────────────────

@router.post("/{slug}/form", response_model=FormDraftSchema)
async def open_new_form(
    slug: str,
    catalog: EntityCatalog = Depends(get_entity_catalog),
    workspace: DashboardWorkspace = Depends(get_workspace),
    session: SessionContext = Depends(get_session_context),
) -> FormDraftSchema:
    """Open an empty form seeded with field defaults."""
    _require_session(session)
    definition = _get_definition(catalog, slug)
    try:
        if session.require().is_admin and not definition.admin_can_create:
            raise PermissionDeniedError(f"Admins cannot add {definition.title} records")
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)

    module = await _current_module(workspace, catalog, slug)
    return FormDraftSchema.from_draft(module.form.open_new())


@router.post("/{slug}/form/submit", response_model=SubmissionResponse)
async def submit_form(
    slug: str,
    response: Response,
    catalog: EntityCatalog = Depends(get_entity_catalog),
    workspace: DashboardWorkspace = Depends(get_workspace),
    session: SessionContext = Depends(get_session_context),
) -> SubmissionResponse:
    """Create or update the record held in the open form."""
    _require_session(session)
    module = await _current_module(workspace, catalog, slug)
    outcome = await module.form.submit()

    if outcome.status == SubmissionStatus.CREATED:
        response.status_code = status.HTTP_201_CREATED
    elif outcome.status == SubmissionStatus.IGNORED:
        response.status_code = status.HTTP_409_CONFLICT
    else:
        response.status_code = _status_for(outcome.error, session)
    return SubmissionResponse.from_outcome(outcome, module.form.draft)


@router.post("/{slug}/form/{record_id}", response_model=FormDraftSchema)
async def open_edit_form(
    slug: str,
    record_id: str,
    catalog: EntityCatalog = Depends(get_entity_catalog),
    workspace: DashboardWorkspace = Depends(get_workspace),
    session: SessionContext = Depends(get_session_context),
) -> FormDraftSchema:
    """Open the form seeded from an existing record."""
    _require_session(session)
    module = await _current_module(workspace, catalog, slug)
    try:
        draft = module.form.open_edit(record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return FormDraftSchema.from_draft(draft)


@router.patch("/{slug}/form", response_model=FormDraftSchema)
async def update_form(
    slug: str,
    data: FormUpdateRequest,
    catalog: EntityCatalog = Depends(get_entity_catalog),
    workspace: DashboardWorkspace = Depends(get_workspace),
    session: SessionContext = Depends(get_session_context),
) -> FormDraftSchema:
    _require_session(session)
    module = await _current_module(workspace, catalog, slug)
    return FormDraftSchema.from_draft(module.form.update(data.values))


@router.delete("/{slug}/form", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_form(
    slug: str,
    catalog: EntityCatalog = Depends(get_entity_catalog),
    workspace: DashboardWorkspace = Depends(get_workspace),
    session: SessionContext = Depends(get_session_context),
) -> None:
    _require_session(session)
    module = await _current_module(workspace, catalog, slug)
    module.form.cancel()


# ── Delete & actions ─────────────────────────────────────────────────

@router.delete("/{slug}/records/{record_id}", response_model=DeleteResponse)
async def delete_record(
    slug: str,
    record_id: str,
    response: Response,
    confirm: bool = Query(False, description="Must be true; deletion is irreversible"),
    catalog: EntityCatalog = Depends(get_entity_catalog),
    workspace: DashboardWorkspace = Depends(get_workspace),
    session: SessionContext = Depends(get_session_context),
) -> DeleteResponse:
    """Delete one record. Without ``confirm=true`` nothing happens."""
    _require_session(session)
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Deletion must be confirmed with confirm=true",
        )

    module = await _current_module(workspace, catalog, slug)
    deleted = await module.form.delete(record_id, confirmed=True)
    if deleted:
        return DeleteResponse(deleted=True)

    error = module.controller.error
    response.status_code = _status_for(error, session)
    return DeleteResponse(deleted=False, error=ViewErrorSchema.from_error(error))


@router.post("/{slug}/records/{record_id}/actions/{action}", response_model=RecordActionResponse)
async def perform_action(
    slug: str,
    record_id: str,
    action: str,
    data: RecordActionRequest,
    response: Response,
    catalog: EntityCatalog = Depends(get_entity_catalog),
    workspace: DashboardWorkspace = Depends(get_workspace),
    session: SessionContext = Depends(get_session_context),
) -> RecordActionResponse:
    """Run a record action such as approve or reject."""
    _require_session(session)
    module = await _current_module(workspace, catalog, slug)
    try:
        ok = await module.form.perform_action(record_id, action, data.values)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    if ok:
        return RecordActionResponse(ok=True)
    error = module.controller.error
    response.status_code = _status_for(error, session)
    return RecordActionResponse(ok=False, error=ViewErrorSchema.from_error(error))


# ── Export ───────────────────────────────────────────────────────────

@router.get("/{slug}/export")
async def export_records(
    slug: str,
    catalog: EntityCatalog = Depends(get_entity_catalog),
    workspace: DashboardWorkspace = Depends(get_workspace),
    session: SessionContext = Depends(get_session_context),
    export_service: ExportService = Depends(get_export_service),
) -> Response:
    """Download the module's current view as an ``.xlsx`` file."""
    _require_session(session)
    module = await _current_module(workspace, catalog, slug)
    export = await export_service.export(module.controller)
    if export is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=module.controller.export_error or "Export failed",
        )

    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
