"""Pydantic models for pagination settings and composed pages."""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field


class PaginationSettings(BaseModel):
    """Bounds applied when clamping ``page``/``per_page`` request values."""
    default_per_page: int = Field(default=20, gt=0)
    default_max_per_page: int = Field(default=200, gt=0)
    default_max_filter_and_search_page: int = Field(default=500, gt=0)


class Page(BaseModel):
    """One ordered page of records plus the pre-pagination match count."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    records: List[Any] = []
    total_count: int = 0
    page_number: int = 1
    per_page: int = 20


class PresentedPage(BaseModel):
    """Composition DTO: a page after every record went through the presenter."""
    count: int
    page: int
    per_page: int
    results: List[dict] = []
