"""Filtering and sorting for the risk register table."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from risk_register.repository import FIELD_ALIASES, RISK_FIELDS
from risk_register.services.risk_scoring import get_risk_label

DEFAULT_SORT_FIELD = "risk_score"
DEFAULT_SORT_DIRECTION = "desc"
SORT_DIRECTIONS = ("asc", "desc")

SORTABLE_FIELDS = set(RISK_FIELDS)

# Free-text search covers these columns only
SEARCH_FIELDS = ("asset", "threat", "vulnerability")

ALL = "all"


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _sort_key(value: Any) -> tuple[int, Any]:
    """Order numbers numerically, timestamps chronologically and text case-insensitively."""
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (0, value)
    if isinstance(value, datetime):
        return (1, value.timestamp())
    return (2, str(value).casefold())


def sort_field(field: str) -> str:
    """Resolve a camelCase or stored column name to the record field it sorts."""
    return FIELD_ALIASES.get(field, field)


def sort_records(
    records: list[dict[str, Any]],
    field: str = DEFAULT_SORT_FIELD,
    direction: str = DEFAULT_SORT_DIRECTION,
) -> list[dict[str, Any]]:
    """Sort records by a single field.

    The sort is stable. Records with no value for the field are placed last
    whichever direction is requested.

    Args:
        records: Risk record dicts.
        field: Name of the field to sort on; aliases such as ``riskLevel``
            are accepted.
        direction: ``"asc"`` or ``"desc"``.

    Returns:
        A new, sorted list.

    Raises:
        ValueError: If the field or direction is not recognised.
    """
    field = sort_field(field)
    if field not in SORTABLE_FIELDS:
        raise ValueError(f"Cannot sort by '{field}'")
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Sort direction must be 'asc' or 'desc', not '{direction}'")

    present = [r for r in records if not _is_missing(r.get(field))]
    missing = [r for r in records if _is_missing(r.get(field))]
    present.sort(key=lambda r: _sort_key(r[field]), reverse=direction == "desc")
    return present + missing


def toggle_sort(current_field: str, current_direction: str, selected_field: str) -> tuple[str, str]:
    """Return the sort state after a column is selected.

    Re-selecting the current column flips the direction; a new column
    starts ascending.
    """
    if selected_field == current_field:
        return current_field, "asc" if current_direction == "desc" else "desc"
    return selected_field, "asc"


def matches_search(record: dict[str, Any], search: str) -> bool:
    """Case-insensitive substring match over asset, threat and vulnerability."""
    term = search.lower()
    if not term:
        return True
    return any(term in str(record.get(f) or "").lower() for f in SEARCH_FIELDS)


def filter_records(
    records: list[dict[str, Any]],
    search: str = "",
    category: str = ALL,
    level: str = ALL,
) -> list[dict[str, Any]]:
    """Keep records matching the search term, category and risk level together."""
    wanted_category = category.strip().lower()
    wanted_level = level.strip().lower()

    results = []
    for record in records:
        if not matches_search(record, search):
            continue
        if wanted_category != ALL and str(record.get("category") or "").lower() != wanted_category:
            continue
        if wanted_level != ALL and get_risk_label(record.get("risk_score") or 0.0).lower() != wanted_level:
            continue
        results.append(record)
    return results


def query_records(
    records: list[dict[str, Any]],
    search: str = "",
    category: str = ALL,
    level: str = ALL,
    sort: str = DEFAULT_SORT_FIELD,
    direction: str = DEFAULT_SORT_DIRECTION,
) -> list[dict[str, Any]]:
    """Filter then sort."""
    return sort_records(filter_records(records, search, category, level), sort, direction)
