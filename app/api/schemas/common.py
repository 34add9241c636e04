import math

from pydantic import BaseModel


class Pagination(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, page_size: int) -> "Pagination":
        return cls(total=total, page=page, page_size=page_size, pages=math.ceil(total / page_size))


class ErrorResponse(BaseModel):
    detail: str


class ConflictResponse(ErrorResponse):
    reason: str
