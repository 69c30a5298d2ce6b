import math
from typing import Any, Dict, Tuple


def normalize_paging(page: Any, page_size: Any, max_page_size: int = 100, default_size: int = 10) -> Tuple[int, int]:
    p = _as_int(page)
    ps = _as_int(page_size)
    p = p if p and p > 0 else 1
    ps = ps if ps and ps > 0 else default_size
    ps = min(ps, max_page_size)
    return p, ps


def page_meta(page: int, page_size: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": page_size,
        "total": total,
        "totalPages": math.ceil(total / page_size) if page_size else 0,
    }


def _as_int(value: Any):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
