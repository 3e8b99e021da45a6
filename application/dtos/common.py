"""Shared request DTOs."""
from __future__ import annotations

from pydantic import BaseModel, Field

from core.config import settings


class PaginationParams(BaseModel):
    """Page/size query parameters; derives skip/limit."""
    page: int = Field(1, ge=1, description="Page number, starting at 1")
    size: int = Field(
        default=settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Page size",
    )

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.size

    @property
    def limit(self) -> int:
        return self.size
