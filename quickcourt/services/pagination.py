import math
from typing import Any, Dict, List, Sequence


def page_bounds(page: int, limit: int):
    page = max(page, 1)
    limit = max(limit, 1)
    return page, limit, (page - 1) * limit


def paginate_query(query, page: int, limit: int) -> Dict[str, Any]:
    page, limit, offset = page_bounds(page, limit)
    total = query.count()
    return {
        "items": query.offset(offset).limit(limit).all(),
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


def paginate_list(items: Sequence, page: int, limit: int) -> Dict[str, Any]:
    page, limit, offset = page_bounds(page, limit)
    total = len(items)
    return {
        "items": list(items[offset:offset + limit]),
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }
