"""Length-aware page of results, shared by query and in-memory pagination."""

import math
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field


class Page(BaseModel):
    """One page of records plus what is needed to link to its neighbours."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: List[Any] = Field(default_factory=list)
    total: int = 0
    per_page: int
    current_page: int = 1
    path: str = "/"
    query: Dict[str, Any] = Field(default_factory=dict)
    page_name: str = "page"

    def __len__(self) -> int:
        return len(self.items)

    @property
    def last_page(self) -> int:
        return max(int(math.ceil(self.total / self.per_page)), 1)

    @property
    def has_more_pages(self) -> bool:
        return self.current_page < self.last_page

    def url(self, page: int) -> str:
        params = dict(self.query)
        params[self.page_name] = max(page, 1)
        return f"{self.path}?{urlencode(params, doseq=True)}"

    @property
    def next_page_url(self) -> Optional[str]:
        return self.url(self.current_page + 1) if self.has_more_pages else None

    @property
    def previous_page_url(self) -> Optional[str]:
        return self.url(self.current_page - 1) if self.current_page > 1 else None


def offset_for(page: int, per_page: int) -> int:
    return (max(page, 1) - 1) * per_page


def paginate_list(
    data: Sequence[Any],
    per_page: int,
    current_page: int = 1,
    path: str = "/",
    query: Optional[Dict[str, Any]] = None,
) -> Page:
    """Slice an in-memory sequence into a Page."""
    if per_page < 1:
        raise ValueError("per_page must be a positive integer")
    start = offset_for(current_page, per_page)
    return Page(
        items=list(data[start:start + per_page]),
        total=len(data),
        per_page=per_page,
        current_page=current_page,
        path=path,
        query=dict(query or {}),
    )
