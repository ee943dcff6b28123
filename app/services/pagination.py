"""
services/pagination.py

목록 API 공통 페이지네이션.

- ?page  : 1 이상 (기본 1, 잘못된 값은 1)
- ?limit : 1 ~ 100 (기본 20, 범위 밖 값은 잘라냄)

응답 형태:
    {"success": true, "data": [...],
     "pagination": {"page", "limit", "total", "totalPages"}}

"""

import math
from dataclasses import dataclass

from fastapi import Query

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _to_int(value: str | None, default: int) -> int:
    try:
        return int(value) if value not in (None, "") else default
    except ValueError:
        return default


# 범위를 벗어난 값은 400 대신 가까운 유효 값으로 보정
def get_page_params(
    page: str | None = Query(None),
    limit: str | None = Query(None),
) -> PageParams:
    page_value = max(1, _to_int(page, 1))
    limit_value = min(MAX_LIMIT, max(1, _to_int(limit, DEFAULT_LIMIT)))
    return PageParams(page=page_value, limit=limit_value)


def paginated(data: list, total: int, params: PageParams) -> dict:
    return {
        "success": True,
        "data": data,
        "pagination": {
            "page": params.page,
            "limit": params.limit,
            "total": total,
            "totalPages": math.ceil(total / params.limit) if total else 0,
        },
    }
