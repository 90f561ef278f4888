"""Colored activity logger — ANSI-colored console logging for record modules.

Provides an ActivityLogger with color-coded output per module activity,
making it easy to trace what each record module does in the terminal.

Color scheme:
    🟢 Green   — Fetch / Refetch
    🟡 Yellow  — Form submission
    🟣 Magenta — Delete
    🔵 Blue    — Export
    🟠 Cyan    — Session / Auth
    ⚪ White   — Record actions
    🔴 Red     — Errors
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


# ── Activity Definitions ─────────────────────────────────────────────

class Activity:
    """Predefined module activities with colors and icons."""

    FETCH = ("FETCH", _Colors.GREEN, "📥")
    SUBMIT = ("SUBMIT", _Colors.YELLOW, "📝")
    DELETE = ("DELETE", _Colors.MAGENTA, "🗑️")
    EXPORT = ("EXPORT", _Colors.BLUE, "📊")
    AUTH = ("AUTH", _Colors.CYAN, "🔑")
    ACTION = ("ACTION", _Colors.WHITE, "⚙️")
    ERROR = ("ERROR", _Colors.RED, "❌")


# ── ActivityLogger ───────────────────────────────────────────────────

class ActivityLogger:
    """Color-coded logger for one record module.

    Usage:
        log = ActivityLogger("dairy_dashboard.records", "medicine-records")
        with log.timed_step(Activity.FETCH, "Loading collection"):
            ...
        log.detail("42 records")
    """

    def __init__(self, logger_name: str, module: str = ""):
        self._logger = logging.getLogger(logger_name)
        self._module = module

    def _prefix(self) -> str:
        return f"{_Colors.GRAY}[{self._module}]{_Colors.RESET} " if self._module else ""

    def step_start(self, activity: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the start of an activity with its color."""
        label, color, icon = activity
        formatted = (
            f"{self._prefix()}{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        if kwargs:
            details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            formatted += f" {_Colors.GRAY}({details}){_Colors.RESET}"
        self._logger.info(formatted)

    def step_complete(self, activity: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the successful completion of an activity."""
        label, color, icon = activity
        formatted = (
            f"{self._prefix()}{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        if kwargs:
            details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            formatted += f" {_Colors.GRAY}({details}){_Colors.RESET}"
        self._logger.info(formatted)

    def step_error(
        self, activity: tuple[str, str, str], message: str, error: Exception | None = None
    ) -> None:
        """Log an activity failure in red."""
        label, _, _ = activity
        formatted = (
            f"{self._prefix()}{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.warning(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log additional detail (gray/dimmed)."""
        formatted = f"{self._prefix()}   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        if kwargs:
            details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            formatted += f" {_Colors.DIM}({details}){_Colors.RESET}"
        self._logger.debug(formatted)

    @contextmanager
    def timed_step(self, activity: tuple[str, str, str], message: str, **kwargs: Any):
        """Context manager that logs start/end with elapsed time.

        Exceptions are logged and re-raised.
        """
        self.step_start(activity, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(activity, f"{message} — failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(activity, f"{message} — {elapsed:.2f}s")
