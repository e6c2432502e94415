# server/core/envelope.py

from typing import Any
from pydantic import BaseModel, Field


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int
    has_more: bool = Field(serialization_alias="hasMore")


def has_more(limit: int, offset: int, total: int) -> bool:
    return offset + limit < total


def success(data: Any = None) -> dict:
    return {"data": data, "error": None}


def failure(message: str) -> dict:
    return {"data": None, "error": message}


def paginated(records: list, limit: int, offset: int, total: int) -> dict:
    pagination = Pagination(
        limit=limit,
        offset=offset,
        total=total,
        has_more=has_more(limit, offset, total),
    )
    return {
        "data": records,
        "pagination": pagination.model_dump(by_alias=True),
        "error": None,
    }
