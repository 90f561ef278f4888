"""Export service — produces the downloadable spreadsheet of a record module.

Two strategies, chosen per entity in the catalog:

- ``server``: the farm API builds the workbook from the current filter
  state and the ownership scope sent as query parameters.
- ``client``: the workbook is built here from the currently visible rows,
  with human-readable column headers and DD/MM/YYYY dates.

Export failures never touch the module's list or its error banner; they
only set the transient ``export_error`` on the controller.
"""

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from dairy_dashboard.application.interfaces import RecordGateway, SpreadsheetWriter
from dairy_dashboard.application.services.filter_predicate import active_categories, parse_day
from dairy_dashboard.application.services.record_list_controller import (
    NOT_AUTHENTICATED,
    RecordListController,
)
from dairy_dashboard.application.services.session_context import SessionContext
from dairy_dashboard.domain.entities import (
    EntityDefinition,
    ExportFile,
    ExportStrategy,
    FieldDefinition,
    FieldKind,
    Record,
    ScopeQuery,
    UserSession,
)
from dairy_dashboard.domain.exceptions import (
    AuthenticationFailedError,
    FarmApiError,
    RecordNotFoundError,
    RecordValidationError,
)
from dairy_dashboard.infrastructure.logging.colored_logger import Activity, ActivityLogger
from dairy_dashboard.infrastructure.logging.log_config import RECORDS_LOGGER

logger = logging.getLogger(__name__)

EXPORT_FAILED = "Failed to export data"
CLIENT_EXPORT_FAILED = "Export failed"

# Excel limits sheet titles to 31 characters
_MAX_SHEET_TITLE = 31


class ExportService:
    """Builds or downloads the spreadsheet for one record module."""

    def __init__(
        self,
        gateway: RecordGateway,
        writer: SpreadsheetWriter,
        session: SessionContext,
        clock: Callable[[], date] = date.today,
    ):
        self._gateway = gateway
        self._writer = writer
        self._session = session
        self._clock = clock

    def filename_for(self, definition: EntityDefinition) -> str:
        return f"{definition.export_name}_{self._clock().isoformat()}.xlsx"

    async def export(self, controller: RecordListController) -> ExportFile | None:
        """Produce the module's spreadsheet, or None on failure.

        A call while an export of the same module is running is ignored.
        """
        if controller.exporting:
            return None

        definition = controller.definition
        log = ActivityLogger(RECORDS_LOGGER, definition.slug)
        controller.exporting = True
        controller.export_error = None
        try:
            session = self._session.current
            if session is None:
                controller.export_error = NOT_AUTHENTICATED
                return None

            if definition.export == ExportStrategy.CLIENT:
                with log.timed_step(Activity.EXPORT, "Building spreadsheet locally"):
                    return self._build_client_export(definition, controller.visible_records())

            params = controller.filters.to_query_params(
                active_categories(controller.filters, definition)
            )
            params.update(ownership_params(session, controller.scope))

            with log.timed_step(Activity.EXPORT, "Requesting spreadsheet", params=len(params)):
                content = await self._gateway.export_records(
                    definition.export_resource, token=session.token, params=params
                )
            return ExportFile(filename=self.filename_for(definition), content=content)

        except (AuthenticationFailedError, RecordNotFoundError, RecordValidationError, FarmApiError):
            controller.export_error = EXPORT_FAILED
        except (ValueError, OSError) as e:
            logger.warning("Local export of %s failed: %s", definition.slug, e)
            controller.export_error = CLIENT_EXPORT_FAILED
        finally:
            controller.exporting = False
        return None

    def _build_client_export(
        self, definition: EntityDefinition, records: list[Record]
    ) -> ExportFile:
        columns = definition.columns
        headers = [f.label for f in columns]
        rows = [[format_cell(record.get(f.name), f) for f in columns] for record in records]
        content = self._writer.write(definition.export_sheet[:_MAX_SHEET_TITLE], headers, rows)
        return ExportFile(
            filename=self.filename_for(definition),
            content=content,
            row_count=len(rows),
            headers=headers,
        )


def ownership_params(session: UserSession, scope: ScopeQuery) -> dict[str, str]:
    """Scope parameter every server export carries.

    Admins send their selected scope, every supervisor when none is picked;
    everybody else exports their own records.
    """
    if not session.is_admin:
        return {"supervisorId": session.user_id}
    return scope.to_query_params() or {"all_supervisors": "true"}


def format_cell(value: Any, field: FieldDefinition) -> Any:
    """Render one value the way the exported sheet shows it."""
    if value is None:
        return ""
    if field.kind == FieldKind.DATE:
        day = parse_day(value)
        return day.strftime("%d/%m/%Y") if day else str(value)
    if field.kind == FieldKind.BOOLEAN or isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (dict, list)):
        return str(value)
    return value
