"""Pagination request and result models."""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    """A validated page request; ``page_token`` None means the first page."""

    max_results: int
    page_token: str | None = None


@dataclass
class PageResult(Generic[T]):
    """One page of results. ``items`` is never None."""

    items: list[T] = field(default_factory=list)
    next_page_token: str | None = None

    @property
    def has_next_page(self) -> bool:
        # An empty token is kept as returned but cannot be followed
        return bool(self.next_page_token)

    def to_dict(self, item_key: str = "items") -> dict[str, Any]:
        result: dict[str, Any] = {
            item_key: [
                item.to_dict() if hasattr(item, "to_dict") else item
                for item in self.items
            ]
        }
        if self.next_page_token is not None:
            result["pageToken"] = self.next_page_token
        return result
