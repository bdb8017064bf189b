from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, List, Sequence

from ..envelope import check_offset, clamp_limit
from ..errors import StorageFault
from ..shared.logging import get_logger
from .db import open_connection
from .models import CatalogRecord, Family, Page
from .text_index import MIN_INDEXED_TERM, fts_expression, query_terms

logger = get_logger("catalog.repository")


class CatalogRepository:
    """Read-only queries over an installed catalog (records + name index).

    The connection is opened in read-only mode and may be shared by several
    threads; nothing here writes after install.
    """

    def __init__(self, path: Path, max_limit: int = 100) -> None:
        self._path = Path(path)
        self._max_limit = max_limit
        self._lock = threading.Lock()
        self._conn = open_connection(self._path, read_only=True)
        try:
            self._meta = self._load_meta()
        except StorageFault:
            self._conn.close()
            raise

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "CatalogRepository":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _fetch(self, sql: str, params: Sequence[Any]) -> List[tuple]:
        try:
            with self._lock:
                return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StorageFault(f"catalog query failed at {self._path}: {exc}") from exc

    def _load_meta(self) -> Dict[str, str]:
        rows = self._fetch("SELECT key, value FROM catalog_meta", ())
        meta = {key: value for key, value in rows}
        if "checksum" not in meta:
            raise StorageFault(f"catalog at {self._path} has no checksum metadata")
        return meta

    def info(self) -> Dict[str, Any]:
        return {
            "path": str(self._path),
            "format": int(self._meta.get("format", "0")),
            "checksum": self._meta["checksum"],
            "installed_at": int(self._meta.get("installed_at", "0")),
            "counts": {family.plural: int(self._meta.get(f"count.{family.value}", "0")) for family in Family},
        }

    def list_family(self, family: "Family | str", limit: int, offset: int) -> Page[CatalogRecord]:
        family = Family.parse(family)
        limit = clamp_limit(limit, self._max_limit)
        offset = check_offset(offset)

        rows = self._fetch(
            "SELECT id, name FROM catalog_records WHERE family = ? ORDER BY id ASC LIMIT ? OFFSET ?",
            (family.value, limit, offset),
        )
        (total,) = self._fetch("SELECT COUNT(*) FROM catalog_records WHERE family = ?", (family.value,))[0]
        items = [CatalogRecord(id=row[0], name=row[1], family=family) for row in rows]
        return Page(items=items, limit=limit, offset=offset, total=total)

    def find(self, family: "Family | str", query: str, limit: int, offset: int) -> Page[CatalogRecord]:
        """Find records whose compact name contains every query word.

        Punctuation is dropped before splitting, so "co-op" and "coop" are
        the same query. Records where the words appear back to back (the
        query's own compact form) rank 2, the rest rank 1; ties go to the
        shorter name, then the lower id. A query with no alphanumeric
        content lists the family in id order.
        """

        family = Family.parse(family)
        terms = query_terms(query)
        if not terms:
            return self.list_family(family, limit, offset)
        limit = clamp_limit(limit, self._max_limit)
        offset = check_offset(offset)

        conditions = ["name_index.family = ?"]
        params: List[Any] = [family.value]
        expression = fts_expression(terms)
        if expression:
            conditions.append("name_index MATCH ?")
            params.append(expression)
        for term in terms:
            if len(term) < MIN_INDEXED_TERM:
                conditions.append("name_index.compact LIKE ?")
                params.append(f"%{term}%")
        where = " AND ".join(conditions)
        matched = f"""
            FROM name_index
            JOIN catalog_records AS r ON r.family = name_index.family AND r.id = name_index.record_id
            WHERE {where}
        """

        rows = self._fetch(
            f"""
            SELECT r.id, r.name, 1 + (instr(name_index.compact, ?) > 0) AS score
            {matched}
            ORDER BY score DESC, name_index.name_len ASC, r.id ASC
            LIMIT ? OFFSET ?
            """,
            ["".join(terms), *params, limit, offset],
        )
        (total,) = self._fetch(f"SELECT COUNT(*) {matched}", params)[0]
        logger.debug("catalog_find", family=family.value, terms=terms, total=total)

        items = [CatalogRecord(id=row[0], name=row[1], family=family, rank=row[2]) for row in rows]
        return Page(items=items, limit=limit, offset=offset, total=total)


__all__ = ["CatalogRepository"]
