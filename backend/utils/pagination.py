from typing import Literal, Optional

from pydantic import BaseModel, Field


class PaginationOptions(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    sort_by: Optional[str] = None
    sort_order: Literal["asc", "desc"] = "desc"

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def build_meta(options: PaginationOptions, total: int) -> dict:
    return {
        "page": options.page,
        "limit": options.limit,
        "total": total,
        "total_pages": (total + options.limit - 1) // options.limit,
    }
