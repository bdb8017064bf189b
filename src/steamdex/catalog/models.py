from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from ..envelope import Pagination, build_pagination
from ..errors import InvalidArgument

T = TypeVar("T")


class Family(str, Enum):
    TAG = "tag"
    GENRE = "genre"
    CATEGORY = "category"

    @property
    def plural(self) -> str:
        return "categories" if self is Family.CATEGORY else f"{self.value}s"

    @classmethod
    def parse(cls, value: "str | Family") -> "Family":
        if isinstance(value, Family):
            return value
        key = str(value or "").strip().lower()
        for family in cls:
            if key in (family.value, family.plural):
                return family
        raise InvalidArgument(f"unknown catalog family '{value}'")


@dataclass(frozen=True, slots=True)
class CatalogRecord:
    id: int
    name: str
    family: Family
    rank: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "name": self.name}
        if self.rank is not None:
            out["rank"] = self.rank
        return out


@dataclass(slots=True)
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    limit: int = 20
    offset: int = 0
    total: Optional[int] = None

    @property
    def returned(self) -> int:
        return len(self.items)

    @property
    def has_more(self) -> bool:
        return self.pagination().has_more

    def pagination(self) -> Pagination:
        return build_pagination(self.limit, self.offset, self.returned, self.total)


__all__ = ["CatalogRecord", "Family", "Page"]
