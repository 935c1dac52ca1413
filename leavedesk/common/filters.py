"""Column filtering and sorting for list queries."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Select, and_
from sqlalchemy.orm import InstrumentedAttribute


def apply_sorting(query: Select, model: Any, sort: Optional[str]) -> Select:
    """ORDER BY a mapped column named in *sort*; ``"-created_at"`` sorts DESC.

    Names that are not mapped columns on *model* leave the query unchanged.
    """
    if not sort:
        return query

    col = _get_column(model, sort.lstrip("-"))
    if col is None:
        return query
    return query.order_by(col.desc() if sort.startswith("-") else col.asc())


def apply_filters(query: Select, model: Any, filters: dict[str, Any]) -> Select:
    """AND together ``column == value`` for each entry in *filters*.

    ``None`` values mean "not filtered"; unknown names are ignored.
    """
    conditions: list = []
    for name, value in filters.items():
        if value is None:
            continue
        col = _get_column(model, name)
        if col is not None:
            conditions.append(col == value)

    if conditions:
        query = query.where(and_(*conditions))
    return query


def _get_column(model: Any, name: str) -> Optional[InstrumentedAttribute]:
    attr = getattr(model, name, None)
    return attr if isinstance(attr, InstrumentedAttribute) else None
