"""
Normalizes free-form listing parameters into a MongoDB query plus pagination.

Every list endpoint (packages, bookings, users) goes through `parse_pagination`
so malformed `page`/`limit` values never raise; packages also go through the
filter and sort parsing.
"""
import math
import re
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel

import config
from database.documents import serialize_doc, to_utc_naive

DEFAULT_SORT = "-createdAt"

# Public sort keys -> stored field names
PACKAGE_SORT_FIELDS = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "basePrice": "base_price",
    "base_price": "base_price",
    "startDate": "start_date",
    "start_date": "start_date",
    "endDate": "end_date",
    "end_date": "end_date",
}


class ListQuery(BaseModel):
    criteria: Dict[str, Any] = {}
    sort: List[Tuple[str, int]] = []
    page: int = 1
    limit: int = 10
    skip: int = 0


class Page(BaseModel):
    items: List[dict] = []
    total: int = 0
    current: int = 1
    pages: int = 0


def _to_positive_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number if number >= 1 else None


def parse_pagination(page: Any = None, limit: Any = None,
                     default_limit: Optional[int] = None) -> Tuple[int, int, int]:
    """Return (page, limit, skip), falling back to defaults for anything unusable."""
    default_limit = default_limit or config.DEFAULT_PAGE_LIMIT
    page_number = _to_positive_int(page) or 1
    page_size = min(_to_positive_int(limit) or default_limit, config.MAX_PAGE_LIMIT)
    return page_number, page_size, (page_number - 1) * page_size


def parse_sort(sort: Optional[str], allowed: Mapping[str, str] = PACKAGE_SORT_FIELDS,
               default: str = DEFAULT_SORT) -> List[Tuple[str, int]]:
    keys = [key.strip() for key in (sort or "").split(",") if key.strip()]
    order = []
    for key in keys:
        direction = -1 if key.startswith("-") else 1
        field = allowed.get(key.lstrip("-"))
        if field and field not in [name for name, _ in order]:
            order.append((field, direction))
    if not order and default:
        return parse_sort(default, allowed, default=None)
    # Ties on the requested keys must page in a fixed order
    if order and "_id" not in [name for name, _ in order]:
        order.append(("_id", order[-1][1]))
    return order


def _parse_date(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return to_utc_naive(value)
    if not value:
        return None
    try:
        return to_utc_naive(datetime.fromisoformat(str(value).strip().replace("Z", "+00:00")))
    except ValueError:
        return None


def _substring(value: Any) -> Optional[Dict[str, str]]:
    text = str(value).strip() if value is not None else ""
    if not text:
        return None
    return {"$regex": re.escape(text), "$options": "i"}


def build_package_criteria(raw_filters: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate fromLocation/toLocation/startDate/endDate into match criteria.

    Unknown keys and empty or unparseable values are dropped.
    """
    criteria: Dict[str, Any] = {}

    for key, field in (("fromLocation", "from_location"), ("toLocation", "to_location")):
        match = _substring(raw_filters.get(key))
        if match:
            criteria[field] = match

    start = _parse_date(raw_filters.get("startDate"))
    if start:
        criteria["start_date"] = {"$gte": start}

    end = _parse_date(raw_filters.get("endDate"))
    if end:
        criteria["end_date"] = {"$lte": end}

    return criteria


def build_query(raw_filters: Mapping[str, Any], page: Any = None, limit: Any = None,
                sort: Optional[str] = None, default_limit: Optional[int] = None) -> ListQuery:
    page_number, page_size, skip = parse_pagination(page, limit, default_limit)
    return ListQuery(
        criteria=build_package_criteria(raw_filters),
        sort=parse_sort(sort),
        page=page_number,
        limit=page_size,
        skip=skip,
    )


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


async def paginate(collection, query: ListQuery, projection: Optional[dict] = None) -> Page:
    find_kwargs = {"skip": query.skip, "limit": query.limit}
    if query.sort:
        find_kwargs["sort"] = query.sort
    cursor = collection.find(query.criteria, projection, **find_kwargs)
    docs = await cursor.to_list(length=query.limit)
    total = await collection.count_documents(query.criteria)
    return Page(
        items=[serialize_doc(doc) for doc in docs],
        total=total,
        current=query.page,
        pages=total_pages(total, query.limit),
    )


def pagination_payload(page: Page) -> dict:
    return {
        "success": True,
        "count": len(page.items),
        "total": page.total,
        "pagination": {"current": page.current, "pages": page.pages},
        "data": page.items,
    }
