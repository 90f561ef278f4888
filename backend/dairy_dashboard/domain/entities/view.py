"""Domain entities for what a record module shows: rows, totals, errors, files."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from .filter_state import FilterState
from .record import Record

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ErrorKind(str, Enum):
    """Error taxonomy surfaced by record modules."""

    AUTH = "auth"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    NETWORK = "network"


@dataclass(frozen=True)
class ViewError:
    """An error banner local to one module instance."""

    kind: ErrorKind
    message: str

    @property
    def retryable(self) -> bool:
        return self.kind == ErrorKind.NETWORK


@dataclass
class RecordListView:
    """Snapshot of one module: visible rows, totals and flags."""

    rows: list[Record]
    totals: dict[str, Decimal]
    total_count: int
    filters: FilterState
    loading: bool = False
    error: ViewError | None = None
    exporting: bool = False
    export_error: str | None = None
    submitting: bool = False
    deleting_id: int | str | None = None

    @property
    def visible_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        """Explicit empty state: loaded fine, nothing to show."""
        return not self.loading and self.error is None and not self.rows


class SubmissionStatus(str, Enum):
    """Result of a form submit."""

    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"
    IGNORED = "ignored"  # another submit for the same draft is still pending


@dataclass
class SubmissionOutcome:
    status: SubmissionStatus
    error: ViewError | None = None

    @property
    def ok(self) -> bool:
        return self.status in (SubmissionStatus.CREATED, SubmissionStatus.UPDATED)


@dataclass
class ExportFile:
    """A spreadsheet ready to be downloaded."""

    filename: str
    content: bytes
    media_type: str = XLSX_MEDIA_TYPE
    row_count: int | None = None
    headers: list[str] = field(default_factory=list)
