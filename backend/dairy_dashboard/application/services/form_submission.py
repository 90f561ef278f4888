"""FormSubmissionFlow — create/update/delete lifecycle of one record module.

A flow is bound to one RecordListController. It owns the form draft,
gates re-entrant submits with the controller's ``submitting`` flag and
tracks the row being deleted through ``deleting_id``. Errors are written
to the controller's banner; the draft is kept so the user can correct it.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from dairy_dashboard.application.interfaces import RecordGateway
from dairy_dashboard.application.services.record_list_controller import (
    NOT_AUTHENTICATED,
    RecordListController,
    same_id,
)
from dairy_dashboard.application.services.session_context import SessionContext
from dairy_dashboard.domain.entities import (
    ErrorKind,
    FieldKind,
    FormDraft,
    SubmissionOutcome,
    SubmissionStatus,
    UserSession,
    ViewError,
)
from dairy_dashboard.domain.exceptions import (
    AuthenticationFailedError,
    EntityNotFoundError,
    FarmApiError,
    RecordNotFoundError,
    RecordValidationError,
)
from dairy_dashboard.infrastructure.logging.colored_logger import Activity, ActivityLogger
from dairy_dashboard.infrastructure.logging.log_config import RECORDS_LOGGER

logger = logging.getLogger(__name__)

SAVE_FAILED = "Failed to save record"
RECORD_NOT_FOUND = "Record not found"
DELETE_FAILED = "Failed to delete record"
DELETE_NETWORK_ERROR = "Network error while deleting"
ACTION_FAILED = "Failed to update record"


class FormSubmissionFlow:
    """Form draft + write operations for one record module."""

    def __init__(
        self,
        controller: RecordListController,
        gateway: RecordGateway,
        session: SessionContext,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._controller = controller
        self._definition = controller.definition
        self._gateway = gateway
        self._session = session
        self._clock = clock
        self._log = ActivityLogger(RECORDS_LOGGER, self._definition.slug)
        self.draft: FormDraft | None = None

    @property
    def is_open(self) -> bool:
        return self.draft is not None

    # ── Draft lifecycle ─────────────────────────────────────────────

    def open_new(self) -> FormDraft:
        self.draft = FormDraft.empty(self._definition, self._clock())
        return self.draft

    def open_edit(self, record_id: int | str) -> FormDraft:
        record = self._controller.find(record_id)
        if record is None:
            self._controller.set_error(ErrorKind.NOT_FOUND, RECORD_NOT_FOUND)
            raise RecordNotFoundError(self._definition.resource, record_id)
        self.draft = FormDraft.from_record(self._definition, record)
        return self.draft

    def update(self, values: dict[str, Any]) -> FormDraft:
        """Merge form input into the open draft (opening a new one if needed).

        Keys that are not editable fields of the entity are ignored.
        """
        if self.draft is None:
            self.open_new()
        known = {f.name for f in self._definition.editable_fields}
        self.draft.update({k: v for k, v in values.items() if k in known})
        return self.draft

    def cancel(self) -> None:
        self.draft = None

    # ── Submit ──────────────────────────────────────────────────────

    async def submit(self) -> SubmissionOutcome:
        """POST a new draft or PUT an edited one, then refetch.

        A second call while one is pending is a no-op.
        """
        if self._controller.submitting:
            return SubmissionOutcome(status=SubmissionStatus.IGNORED)

        draft = self.draft
        if draft is None:
            return self._fail(ErrorKind.VALIDATION, "No form is open")

        self._controller.submitting = True
        try:
            session = self._session.current
            if session is None:
                return self._fail(ErrorKind.AUTH, NOT_AUTHENTICATED)
            if not draft.is_edit and session.is_admin and not self._definition.admin_can_create:
                return self._fail(
                    ErrorKind.AUTH, f"Admins cannot add {self._definition.title} records"
                )

            missing = draft.missing_required(self._definition)
            if missing:
                labels = [self._label(name) for name in missing]
                return self._fail(
                    ErrorKind.VALIDATION, f"Missing required fields: {', '.join(labels)}"
                )

            payload = self._build_payload(draft, session)
            resource = self._definition.resource
            if draft.is_edit:
                with self._log.timed_step(Activity.SUBMIT, "Updating record", id=draft.editing_id):
                    await self._gateway.update_record(
                        resource, draft.editing_id, payload, token=session.token
                    )
                status = SubmissionStatus.UPDATED
            else:
                with self._log.timed_step(Activity.SUBMIT, "Creating record"):
                    await self._gateway.create_record(resource, payload, token=session.token)
                status = SubmissionStatus.CREATED

            if self.draft is draft:
                self.draft = None
            self._controller.clear_error()
            await self._controller.refetch()
            return SubmissionOutcome(status=status)

        except RecordValidationError as e:
            return self._fail(ErrorKind.VALIDATION, e.message)
        except RecordNotFoundError:
            return self._fail(ErrorKind.NOT_FOUND, RECORD_NOT_FOUND)
        except AuthenticationFailedError as e:
            return self._fail(ErrorKind.AUTH, e.message)
        except FarmApiError:
            return self._fail(ErrorKind.NETWORK, SAVE_FAILED)
        finally:
            self._controller.submitting = False

    def _build_payload(self, draft: FormDraft, session: UserSession) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for f in self._definition.editable_fields:
            payload[f.name] = _coerce(draft.values.get(f.name), f.kind)
        payload["user"] = session.user_id
        return payload

    def _label(self, name: str) -> str:
        f = self._definition.get_field(name)
        return f.label if f else name

    def _fail(self, kind: ErrorKind, message: str) -> SubmissionOutcome:
        self._controller.set_error(kind, message)
        return SubmissionOutcome(
            status=SubmissionStatus.FAILED, error=ViewError(kind=kind, message=message)
        )

    # ── Delete ──────────────────────────────────────────────────────

    async def delete(self, record_id: int | str, *, confirmed: bool) -> bool:
        """Delete one record after interactive confirmation.

        On success the row is dropped locally; nothing is refetched.
        """
        if not confirmed:
            return False

        session = self._session.current
        if session is None:
            self._controller.set_error(ErrorKind.AUTH, NOT_AUTHENTICATED)
            return False

        self._controller.deleting_id = record_id
        try:
            with self._log.timed_step(Activity.DELETE, "Deleting record", id=record_id):
                await self._gateway.delete_record(
                    self._definition.resource, record_id, token=session.token
                )
            self._controller.remove_local(record_id)
            return True
        except RecordNotFoundError:
            self._controller.set_error(ErrorKind.NOT_FOUND, RECORD_NOT_FOUND)
        except AuthenticationFailedError as e:
            self._controller.set_error(ErrorKind.AUTH, e.message)
        except FarmApiError as e:
            message = DELETE_NETWORK_ERROR if e.status_code is None else DELETE_FAILED
            self._controller.set_error(ErrorKind.NETWORK, message)
        finally:
            if same_id(self._controller.deleting_id, record_id):
                self._controller.deleting_id = None
        return False

    # ── Record actions ──────────────────────────────────────────────

    async def perform_action(
        self, record_id: int | str, action_name: str, values: dict[str, Any] | None = None
    ) -> bool:
        """Run a catalog-declared action (e.g. approve/reject) and refetch."""
        action = self._definition.get_action(action_name)
        if action is None:
            raise EntityNotFoundError("RecordAction", action_name)

        session = self._session.current
        if session is None:
            self._controller.set_error(ErrorKind.AUTH, NOT_AUTHENTICATED)
            return False

        record = self._controller.find(record_id)
        if record is None:
            self._controller.set_error(ErrorKind.NOT_FOUND, RECORD_NOT_FOUND)
            return False

        values = values or {}
        payload: dict[str, Any] = dict(action.payload)
        for name in action.copy_fields:
            payload[name] = record.get(name)
        for name in action.fields:
            payload[name] = values.get(name, "")
        if action.actor_field:
            payload[action.actor_field] = session.username

        try:
            with self._log.timed_step(Activity.ACTION, f"Running '{action.name}'", id=record_id):
                await self._gateway.perform_action(
                    self._definition.resource,
                    record_id,
                    action.path,
                    payload,
                    token=session.token,
                    method=action.method,
                )
        except RecordValidationError as e:
            self._controller.set_error(ErrorKind.VALIDATION, e.message)
            return False
        except RecordNotFoundError:
            self._controller.set_error(ErrorKind.NOT_FOUND, RECORD_NOT_FOUND)
            return False
        except AuthenticationFailedError as e:
            self._controller.set_error(ErrorKind.AUTH, e.message)
            return False
        except FarmApiError:
            self._controller.set_error(ErrorKind.NETWORK, ACTION_FAILED)
            return False

        await self._controller.refetch()
        return True


def _coerce(value: Any, kind: FieldKind) -> Any:
    """Convert raw form input to the JSON type the farm API expects."""
    if kind == FieldKind.NUMBER:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                try:
                    return float(text)
                except ValueError:
                    return text
        return value
    if kind == FieldKind.BOOLEAN:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes", "y", "on")
        return bool(value)
    if kind in (FieldKind.DATE, FieldKind.TIME) and value == "":
        return None
    return value
