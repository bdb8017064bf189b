from __future__ import annotations

from typing import Any, Dict

from ..catalog.models import CatalogRecord, Family, Page
from ..catalog.repository import CatalogRepository
from ..envelope import DataSource, Envelope, wrap_exception, wrap_ok
from ..errors import SteamdexError


def _page_data(family: Family, page: Page[CatalogRecord], **extra: Any) -> Dict[str, Any]:
    return {"family": family.plural, **extra, "items": [record.to_dict() for record in page.items]}


class CatalogLookupService:
    """List and find catalog records, answered as envelopes sourced from the local db."""

    def __init__(self, repository: CatalogRepository) -> None:
        self._repository = repository

    def list_family(self, family: "Family | str", limit: int, offset: int) -> Envelope:
        try:
            kind = Family.parse(family)
            page = self._repository.list_family(kind, limit, offset)
            return wrap_ok(_page_data(kind, page), page.pagination(), source=DataSource.LOCAL_DB)
        except SteamdexError as exc:
            return wrap_exception(exc, DataSource.LOCAL_DB)

    def find(self, family: "Family | str", query: str, limit: int, offset: int) -> Envelope:
        try:
            kind = Family.parse(family)
            page = self._repository.find(kind, query, limit, offset)
            return wrap_ok(_page_data(kind, page, query=query), page.pagination(), source=DataSource.LOCAL_DB)
        except SteamdexError as exc:
            return wrap_exception(exc, DataSource.LOCAL_DB)


__all__ = ["CatalogLookupService"]
