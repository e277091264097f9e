"""Query helpers for list endpoints: column filters, substring search, sort."""

from __future__ import annotations

import operator
from typing import Any, Callable, Mapping, Optional, Sequence

from sqlalchemy import Select, or_

# ``<column>__<op>`` suffix -> comparison; a bare column name means equality.
OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "": operator.eq,
    "ne": operator.ne,
    "lt": operator.lt,
    "from": operator.ge,
    "to": operator.le,
    "in": lambda col, value: col.in_(value),
    "ilike": lambda col, value: col.ilike(f"%{value}%"),
}


def _column(model: Any, name: str):
    return getattr(model, name, None)


def apply_filters(query: Select, model: Any, filters: Mapping[str, Any]) -> Select:
    """AND together ``filters`` such as ``{"status": "active", "date__from": d}``.

    ``None`` values, unknown columns and unknown suffixes are skipped.
    """
    for key, value in filters.items():
        if value is None:
            continue
        name, _, op = key.partition("__")
        col = _column(model, name)
        compare = OPERATORS.get(op)
        if col is None or compare is None:
            continue
        query = query.where(compare(col, value))
    return query


def apply_search(
    query: Select,
    model: Any,
    search: Optional[str],
    columns: Sequence[str],
) -> Select:
    """Keep rows where any of *columns* contains *search*, ignoring case."""
    term = (search or "").strip()
    cols = [c for c in (_column(model, name) for name in columns) if c is not None]
    if not term or not cols:
        return query
    return query.where(or_(*(c.ilike(f"%{term}%") for c in cols)))


def apply_sorting(query: Select, model: Any, sort: Optional[str]) -> Select:
    """``"name"`` sorts ascending, ``"-created_at"`` descending."""
    if not sort:
        return query
    col = _column(model, sort.lstrip("-"))
    if col is None:
        return query
    return query.order_by(col.desc() if sort.startswith("-") else col.asc())
