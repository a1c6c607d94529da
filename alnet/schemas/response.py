import math
from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import Field

from alnet.schemas.base import CamelModel

T = TypeVar("T")


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    data: T
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorDetail(CamelModel):
    code: str
    message: str
    details: Optional[Any] = None


class ErrorResponse(CamelModel):
    success: bool = False
    error: ErrorDetail
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(total=total, page=page, limit=limit, pages=math.ceil(total / limit) if limit else 0)


class Page(CamelModel, Generic[T]):
    data: List[T]
    pagination: Pagination


class StatusMessage(CamelModel):
    message: str


def success_response(data: Any) -> dict:
    """Wrap a payload in the success envelope"""
    return {"success": True, "data": data, "timestamp": datetime.utcnow()}


def paginate(items: List[Any], total: int, page: int, limit: int) -> dict:
    return {"data": items, "pagination": Pagination.build(total, page, limit)}
