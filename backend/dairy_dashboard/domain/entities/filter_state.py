"""Domain entity — the ephemeral filter state of one record module."""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class FilterState:
    """Free-text search, inclusive date range and categorical filters.

    Never persisted. Leaves the process only as export (or server-side
    fetch) query parameters.
    """

    search_term: str = ""
    start_date: date | None = None
    end_date: date | None = None
    categories: dict[str, str] = field(default_factory=dict)

    @property
    def has_date_range(self) -> bool:
        return self.start_date is not None or self.end_date is not None

    def is_empty(self, sentinel: str = "All") -> bool:
        """True when no constraint is active."""
        if self.search_term or self.has_date_range:
            return False
        return all(value in ("", sentinel) for value in self.categories.values())

    def to_query_params(self, active_categories: dict[str, str] | None = None) -> dict[str, str]:
        """Serialise to farm API query parameters.

        Only the categories passed in ``active_categories`` are sent; callers
        strip sentinel values first.
        """
        params: dict[str, str] = {}
        if self.start_date:
            params["start_date"] = self.start_date.isoformat()
        if self.end_date:
            params["end_date"] = self.end_date.isoformat()
        if self.search_term:
            params["search"] = self.search_term
        for key, value in (active_categories or {}).items():
            params[key] = value
        return params
