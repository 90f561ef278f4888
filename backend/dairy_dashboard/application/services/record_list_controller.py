"""RecordListController — the local copy of one farm record collection.

Owns fetch/refetch, the loading flag, the module's error banner, the
current filter state and everything derived from it (visible rows and
totals). Every fetch replaces the whole collection; writes are never
patched in locally except for deletions.
"""

import logging
from decimal import Decimal

from dairy_dashboard.application.interfaces import RecordGateway
from dairy_dashboard.application.services.filter_predicate import (
    active_categories,
    compute_totals,
    filter_records,
    sort_records,
)
from dairy_dashboard.application.services.session_context import SessionContext
from dairy_dashboard.domain.entities import (
    EntityDefinition,
    ErrorKind,
    FilterState,
    Record,
    RecordListView,
    ScopeQuery,
    ViewError,
)
from dairy_dashboard.domain.exceptions import AuthenticationFailedError, FarmApiError
from dairy_dashboard.infrastructure.logging.colored_logger import Activity, ActivityLogger
from dairy_dashboard.infrastructure.logging.log_config import RECORDS_LOGGER

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "User not authenticated"
FETCH_FAILED = "Failed to fetch records"
NETWORK_ERROR = "Network error"
AUTH_FAILED = "Authentication failed. Please login again."


def same_id(left: int | str | None, right: int | str | None) -> bool:
    """Compare record ids that may arrive as int (JSON) or str (URL path)."""
    if left is None or right is None:
        return False
    return str(left) == str(right)


class RecordListController:
    """Authoritative local copy of one record collection.

    A controller lives between ``mount`` (construction) and ``unmount``.
    Responses that resolve after ``unmount`` never touch its state.
    Concurrent fetches are neither queued nor cancelled: the last response
    to resolve wins.
    """

    def __init__(
        self,
        definition: EntityDefinition,
        gateway: RecordGateway,
        session: SessionContext,
        scope: ScopeQuery | None = None,
    ):
        self._definition = definition
        self._gateway = gateway
        self._session = session
        self._scope = scope or ScopeQuery()
        self._records: list[Record] = []
        self._filters = FilterState()
        self._mounted = True
        self._log = ActivityLogger(RECORDS_LOGGER, definition.slug)

        self.loading = False
        self.error: ViewError | None = None
        self.exporting = False
        self.export_error: str | None = None
        self.submitting = False
        self.deleting_id: int | str | None = None

    # ── Properties ──────────────────────────────────────────────────

    @property
    def definition(self) -> EntityDefinition:
        return self._definition

    @property
    def scope(self) -> ScopeQuery:
        return self._scope

    @property
    def records(self) -> list[Record]:
        return list(self._records)

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    # ── Lifecycle ───────────────────────────────────────────────────

    def unmount(self) -> None:
        """Dispose the controller; late responses are dropped from now on."""
        self._mounted = False
        self._filters = FilterState()
        logger.debug("Unmounted module %s (scope=%s)", self._definition.slug, self._scope.key)

    # ── Fetch ───────────────────────────────────────────────────────

    async def fetch(self, scope: ScopeQuery | None = None) -> bool:
        """Load the full collection for the current scope.

        Returns True when the collection was replaced.
        """
        if scope is not None:
            self._scope = scope
        if not self._mounted:
            return False

        self.loading = True
        self.error = None
        try:
            session = self._session.current
            if session is None:
                self.set_error(ErrorKind.AUTH, NOT_AUTHENTICATED)
                return False

            with self._log.timed_step(Activity.FETCH, "Loading collection", scope=self._scope.key):
                payload = await self._gateway.list_records(
                    self._definition.resource,
                    token=session.token,
                    params=self._fetch_params(),
                )

            if not self._mounted:
                logger.debug("Dropping late response for %s", self._definition.slug)
                return False

            records = [Record.from_api(item, self._definition.id_field) for item in payload]
            self._records = sort_records(records, self._definition.order_by)
            self._log.detail(f"{len(self._records)} records loaded")
            return True

        except AuthenticationFailedError as e:
            self.set_error(ErrorKind.AUTH, e.message)
        except FarmApiError as e:
            self.set_error(
                ErrorKind.NETWORK, NETWORK_ERROR if e.status_code is None else FETCH_FAILED
            )
        except ValueError as e:
            logger.warning("Malformed %s payload: %s", self._definition.resource, e)
            self.set_error(ErrorKind.NETWORK, FETCH_FAILED)
        finally:
            if self._mounted:
                self.loading = False
        return False

    async def refetch(self) -> bool:
        """Re-derive the collection from the farm API after a write."""
        return await self.fetch()

    async def retry(self) -> bool:
        """Manual recovery after an error banner — same contract as fetch."""
        return await self.fetch()

    def _fetch_params(self) -> dict[str, str]:
        params = self._scope.to_query_params()
        if self._definition.server_filters:
            params.update(
                self._filters.to_query_params(active_categories(self._filters, self._definition))
            )
        return params

    # ── Filters & derived state ─────────────────────────────────────

    def apply_filters(self, state: FilterState) -> None:
        if self._mounted:
            self._filters = state

    def clear_filters(self) -> None:
        if self._mounted:
            self._filters = FilterState()

    def visible_records(self) -> list[Record]:
        return filter_records(self._records, self._filters, self._definition)

    def totals(self) -> dict[str, Decimal]:
        """Totals over the visible rows only."""
        return compute_totals(self.visible_records(), self._definition.totals)

    def view(self) -> RecordListView:
        rows = self.visible_records()
        return RecordListView(
            rows=rows,
            totals=compute_totals(rows, self._definition.totals),
            total_count=len(self._records),
            filters=self._filters,
            loading=self.loading,
            error=self.error,
            exporting=self.exporting,
            export_error=self.export_error,
            submitting=self.submitting,
            deleting_id=self.deleting_id,
        )

    # ── Local mutations ─────────────────────────────────────────────

    def find(self, record_id: int | str) -> Record | None:
        for record in self._records:
            if same_id(record.id, record_id):
                return record
        return None

    def remove_local(self, record_id: int | str) -> None:
        if self._mounted:
            self._records = [r for r in self._records if not same_id(r.id, record_id)]

    def set_error(self, kind: ErrorKind, message: str) -> None:
        if self._mounted:
            self.error = ViewError(kind=kind, message=message)

    def clear_error(self) -> None:
        if self._mounted:
            self.error = None
