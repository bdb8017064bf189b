"""Seed snapshot format.

A snapshot is a UTF-8 JSON document::

    {
      "format": 1,
      "checksum": "<sha256 of the canonical families object>",
      "families": {
        "tag": [{"id": 3964, "name": "Co-op"}, ...],
        "genre": [...],
        "category": [...]
      }
    }

The canonical form of ``families`` is compact JSON with sorted keys and no
ASCII escaping, so ``jq -cS .families seed.json | sha256sum`` reproduces the
checksum outside of Python.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping

from ..errors import StorageFault
from .models import CatalogRecord, Family

SNAPSHOT_FORMAT = 1


@dataclass(slots=True)
class Snapshot:
    checksum: str
    records: Dict[Family, List[CatalogRecord]] = field(default_factory=dict)

    def iter_records(self) -> Iterator[CatalogRecord]:
        for family in Family:
            yield from self.records.get(family, [])

    def counts(self) -> Dict[Family, int]:
        return {family: len(self.records.get(family, [])) for family in Family}


def canonical_bytes(families: Mapping[str, Any]) -> bytes:
    return json.dumps(families, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def checksum_of(families: Mapping[str, Any]) -> str:
    return hashlib.sha256(canonical_bytes(families)).hexdigest()


def _parse_family(family: Family, rows: Any) -> List[CatalogRecord]:
    if not isinstance(rows, list):
        raise StorageFault(f"snapshot family '{family.value}' is not a list")
    seen: set[int] = set()
    records: List[CatalogRecord] = []
    for position, row in enumerate(rows):
        if not isinstance(row, dict):
            raise StorageFault(f"snapshot {family.value}[{position}] is not an object")
        record_id = row.get("id")
        name = row.get("name")
        if isinstance(record_id, bool) or not isinstance(record_id, int):
            raise StorageFault(f"snapshot {family.value}[{position}] has a non-integer id")
        if not isinstance(name, str) or not name.strip():
            raise StorageFault(f"snapshot {family.value}[{position}] has an empty name")
        if record_id in seen:
            raise StorageFault(f"snapshot {family.value} repeats id {record_id}")
        seen.add(record_id)
        records.append(CatalogRecord(id=record_id, name=name, family=family))
    return records


def parse_snapshot(raw: bytes) -> Snapshot:
    """Decode and verify snapshot bytes; any defect raises StorageFault."""

    try:
        doc = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise StorageFault(f"seed snapshot is unreadable: {exc}") from exc

    if not isinstance(doc, dict):
        raise StorageFault("seed snapshot root is not an object")
    if doc.get("format") != SNAPSHOT_FORMAT:
        raise StorageFault(f"unsupported seed snapshot format {doc.get('format')!r}")

    families = doc.get("families")
    if not isinstance(families, dict):
        raise StorageFault("seed snapshot has no families object")

    expected = doc.get("checksum")
    actual = checksum_of(families)
    if expected != actual:
        raise StorageFault(f"seed snapshot checksum mismatch (expected {expected}, got {actual})")

    records: Dict[Family, List[CatalogRecord]] = {}
    for family in Family:
        if family.value not in families:
            raise StorageFault(f"seed snapshot is missing family '{family.value}'")
        records[family] = _parse_family(family, families[family.value])

    return Snapshot(checksum=actual, records=records)


def build_snapshot(families: Mapping[Family, Iterable[tuple[int, str]]]) -> bytes:
    """Serialize ``{family: [(id, name), ...]}`` into snapshot bytes."""

    payload: Dict[str, List[Dict[str, Any]]] = {}
    for family in Family:
        rows = sorted(families.get(family, []), key=lambda row: row[0])
        payload[family.value] = [{"id": int(record_id), "name": name} for record_id, name in rows]
    doc = {"format": SNAPSHOT_FORMAT, "checksum": checksum_of(payload), "families": payload}
    return (json.dumps(doc, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


__all__ = ["SNAPSHOT_FORMAT", "Snapshot", "build_snapshot", "canonical_bytes", "checksum_of", "parse_snapshot"]
