"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class NotAuthenticatedError(Exception):
    """Raised before any network call when no session token is available."""

    def __init__(self, message: str = "User not authenticated"):
        self.message = message
        super().__init__(message)


class AuthenticationFailedError(Exception):
    """Raised when the farm API rejects the session token (HTTP 401) or a login."""

    def __init__(self, message: str = "Authentication failed. Please login again."):
        self.message = message
        super().__init__(message)


class PermissionDeniedError(Exception):
    """Raised when the current role may not perform an operation."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RecordNotFoundError(Exception):
    """Raised when the farm API answers 404 for a record."""

    def __init__(self, resource: str, record_id: int | str):
        self.resource = resource
        self.record_id = record_id
        super().__init__(f"{resource} record '{record_id}' not found")


class RecordValidationError(Exception):
    """Raised when a write is rejected with a field-level error payload.

    ``message`` is the human-readable join of every field message.
    """

    def __init__(self, field_errors: dict, fallback: str = "Failed to save record"):
        self.field_errors = field_errors
        self.message = join_error_messages(field_errors) or fallback
        super().__init__(self.message)


class FarmApiError(Exception):
    """Raised when the farm API fails or cannot be reached.

    ``status_code`` is ``None`` for transport errors (timeouts, refused
    connections, ...).
    """

    def __init__(self, status_code: int | None, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"[farm-api] {status_code}: {message}")


def join_error_messages(payload: object) -> str:
    """Flatten a farm API error payload into one comma-separated message."""
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload
    if isinstance(payload, dict):
        parts = [join_error_messages(value) for value in payload.values()]
    elif isinstance(payload, (list, tuple)):
        parts = [join_error_messages(value) for value in payload]
    else:
        return str(payload)
    return ", ".join(part for part in parts if part)
