"""Record filtering, sorting and totals — pure functions, no I/O.

``matches`` decides whether one record belongs in the visible subset.
All three rules must hold:

* free text — empty term, or any search field contains it (case-insensitive);
* date range — inclusive bounds, compared by calendar day;
* categorical — each active filter equals the record's field.

A record whose date is missing only passes an active date range when the
entity declares ``nullable_date``.
"""

from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from dairy_dashboard.domain.entities import EntityDefinition, FilterState, Record

_ZERO = Decimal("0")


def parse_day(value: Any) -> date | None:
    """Parse a record date value to a calendar day.

    Accepts ``date``/``datetime`` objects and ISO strings
    (``YYYY-MM-DD``, full ISO datetimes, or ``YYYY-MM`` months, which
    map to the first of the month). Returns ``None`` for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        if len(text) >= 10:
            return date.fromisoformat(text[:10])
        if len(text) == 7:
            year, month = text.split("-")
            return date(int(year), int(month), 1)
    except ValueError:
        return None
    return None


def matches_search(record: Record, search_term: str, search_fields: Iterable[str]) -> bool:
    if not search_term:
        return True
    needle = search_term.lower()
    for name in search_fields:
        value = record.get(name)
        if value is None:
            continue
        if needle in str(value).lower():
            return True
    return False


def matches_date_range(
    record: Record,
    date_field: str | None,
    start: date | None,
    end: date | None,
    *,
    nullable: bool = False,
) -> bool:
    if start is None and end is None:
        return True
    if date_field is None:
        return True

    day = parse_day(record.get(date_field))
    if day is None:
        return nullable
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


def matches_categories(
    record: Record, categories: dict[str, str], definition: EntityDefinition
) -> bool:
    for field_name, wanted in categories.items():
        cf = definition.get_filter(field_name)
        if cf is None or not cf.is_active(wanted):
            continue
        actual = record.get(field_name)
        if actual is None or str(actual) != wanted:
            return False
    return True


def matches(record: Record, state: FilterState, definition: EntityDefinition) -> bool:
    """True when ``record`` belongs in the visible subset for ``state``."""
    return (
        matches_search(record, state.search_term, definition.search_fields)
        and matches_date_range(
            record,
            definition.date_field,
            state.start_date,
            state.end_date,
            nullable=definition.nullable_date,
        )
        and matches_categories(record, state.categories, definition)
    )


def filter_records(
    records: Iterable[Record], state: FilterState, definition: EntityDefinition
) -> list[Record]:
    return [r for r in records if matches(r, state, definition)]


def active_categories(state: FilterState, definition: EntityDefinition) -> dict[str, str]:
    """Categorical filters of ``state`` that actually constrain the view."""
    result: dict[str, str] = {}
    for field_name, value in state.categories.items():
        cf = definition.get_filter(field_name)
        if cf is not None and cf.is_active(value):
            result[field_name] = value
    return result


# ── Totals ───────────────────────────────────────────────────────────


def to_decimal(value: Any) -> Decimal:
    """Numeric value of a field, ``0`` for null or non-numeric values."""
    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else _ZERO
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return _ZERO
    try:
        number = Decimal(value.strip().replace(",", ""))
    except InvalidOperation:
        return _ZERO
    return number if number.is_finite() else _ZERO


def compute_totals(records: Iterable[Record], fields: Iterable[str]) -> dict[str, Decimal]:
    """Sum each field over ``records`` (callers pass the filtered subset)."""
    names = list(fields)
    totals = {name: _ZERO for name in names}
    for record in records:
        for name in names:
            totals[name] += to_decimal(record.get(name))
    return totals


# ── Ordering ─────────────────────────────────────────────────────────


def _sort_value(value: Any) -> tuple[int, Any]:
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float, Decimal)):
        return (0, Decimal(str(value)))
    if isinstance(value, (date, datetime)):
        return (1, value.isoformat())
    text = str(value)
    if parse_day(text) is not None:
        # ISO strings order lexically
        return (1, text)
    return (2, text.lower())


def sort_records(records: Iterable[Record], order_by: list[str]) -> list[Record]:
    """Sort by ``order_by`` keys (``-`` prefix for descending); missing values last."""
    result = list(records)
    for key in reversed(order_by):
        descending = key.startswith("-")
        name = key.lstrip("-")
        present = [r for r in result if r.get(name) not in (None, "")]
        missing = [r for r in result if r.get(name) in (None, "")]
        present.sort(key=lambda r: _sort_value(r.get(name)), reverse=descending)
        result = present + missing
    return result
