"""
Pagination helpers shared by every list endpoint.

``build_pagination`` is the single place the page window and its metadata
are computed; ``paginate`` runs the count and the page fetch off the same
query so the two always agree.
"""
from __future__ import annotations
import math
from typing import Any, Mapping, Sequence
from sqlalchemy import func, select
from sqlalchemy.orm import Session

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def _positive_int(raw: Any, default: int) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def parse_page_args(args: Mapping[str, Any], default_limit: int = DEFAULT_LIMIT,
                    max_limit: int = MAX_LIMIT) -> tuple[int, int]:
    """
    Read ``page`` and ``limit`` from a query-string mapping.

    Missing, non-numeric or < 1 values fall back to the defaults; ``limit``
    is capped at ``max_limit``.
    """
    page = _positive_int(args.get("page"), 1)
    limit = min(_positive_int(args.get("limit"), default_limit), max_limit)
    return page, limit


def build_pagination(page: int, limit: int, total_count: int) -> dict:
    skip = (page - 1) * limit
    total_pages = math.ceil(total_count / limit) if limit else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalCount": total_count,
        "limit": limit,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
        "startIndex": skip + 1,
        "endIndex": min(skip + limit, total_count),
    }


def count_rows(session: Session, model, predicate=None) -> int:
    stmt = select(func.count()).select_from(model)
    if predicate is not None:
        stmt = stmt.where(predicate)
    return int(session.execute(stmt).scalar_one())


def paginate(session: Session, model, predicate, page: int, limit: int,
             order_by: Sequence = (), options: Sequence = ()) -> tuple[list, dict]:
    """
    Fetch one page of ``model`` rows matching ``predicate``.

    The count and the page use the same predicate. A page past the end
    returns an empty list; the page number is not clamped.
    """
    total = count_rows(session, model, predicate)
    stmt = select(model)
    if predicate is not None:
        stmt = stmt.where(predicate)
    stmt = stmt.order_by(*order_by).options(*options).offset((page - 1) * limit).limit(limit)
    rows = list(session.execute(stmt).scalars().unique())
    return rows, build_pagination(page, limit, total)
