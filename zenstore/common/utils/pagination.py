from typing import Dict, Tuple


def normalize_paging(page: int, page_size: int, max_page_size: int = 100) -> Tuple[int, int]:
    p = page if page and page > 0 else 1
    ps = page_size if page_size and page_size > 0 else 12
    ps = min(ps, max_page_size)
    return p, ps


def page_meta(page: int, page_size: int, total: int) -> Dict:
    skip = (page - 1) * page_size
    return {
        "page": page,
        "page_size": page_size,
        "total": total,
        "total_pages": -(-total // page_size) if page_size else 0,
        "has_next": skip + page_size < total,
        "has_prev": page > 1,
    }
