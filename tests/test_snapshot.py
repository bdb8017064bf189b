from __future__ import annotations

import json

import pytest

from steamdex.catalog.models import Family
from steamdex.catalog.seed import load_bundled_snapshot
from steamdex.catalog.snapshot import build_snapshot, canonical_bytes, checksum_of, parse_snapshot
from steamdex.errors import StorageFault


def _tamper(raw: bytes, mutate) -> bytes:
    doc = json.loads(raw)
    mutate(doc)
    return json.dumps(doc).encode("utf-8")


def test_build_and_parse_snapshot(snapshot_bytes: bytes) -> None:
    snapshot = parse_snapshot(snapshot_bytes)
    counts = snapshot.counts()
    assert counts[Family.GENRE] == 12
    assert counts[Family.CATEGORY] == 5
    coop = [r for r in snapshot.records[Family.TAG] if r.id == 3964]
    assert coop and coop[0].name == "Co-op"


def test_canonical_form_is_sorted_compact_utf8() -> None:
    assert canonical_bytes({"b": [1], "a": "Café"}) == '{"a":"Café","b":[1]}'.encode("utf-8")


def test_checksum_mismatch_is_storage_fault(snapshot_bytes: bytes) -> None:
    def rename(doc):
        doc["families"]["tag"][0]["name"] = "Renamed"

    with pytest.raises(StorageFault, match="checksum"):
        parse_snapshot(_tamper(snapshot_bytes, rename))


def test_unreadable_snapshot_is_storage_fault() -> None:
    with pytest.raises(StorageFault):
        parse_snapshot(b"\xff\xfe\x00")
    with pytest.raises(StorageFault):
        parse_snapshot(b'{"format": 1, "families": ')


def test_unknown_format_is_storage_fault(snapshot_bytes: bytes) -> None:
    def bump(doc):
        doc["format"] = 2

    with pytest.raises(StorageFault, match="format"):
        parse_snapshot(_tamper(snapshot_bytes, bump))


def test_missing_family_is_storage_fault() -> None:
    families = {"tag": [{"id": 1, "name": "Action"}], "genre": []}
    raw = json.dumps({"format": 1, "checksum": checksum_of(families), "families": families}).encode()
    with pytest.raises(StorageFault, match="category"):
        parse_snapshot(raw)


@pytest.mark.parametrize(
    "rows, message",
    [
        ([{"id": 1, "name": "A"}, {"id": 1, "name": "B"}], "repeats"),
        ([{"id": "1", "name": "A"}], "non-integer"),
        ([{"id": True, "name": "A"}], "non-integer"),
        ([{"id": 1, "name": "  "}], "empty name"),
    ],
)
def test_malformed_rows_are_storage_fault(rows, message) -> None:
    families = {"tag": rows, "genre": [], "category": []}
    raw = json.dumps({"format": 1, "checksum": checksum_of(families), "families": families}).encode()
    with pytest.raises(StorageFault, match=message):
        parse_snapshot(raw)


def test_build_snapshot_orders_rows_by_id() -> None:
    raw = build_snapshot({Family.TAG: [(30, "C"), (10, "A"), (20, "B")]})
    doc = json.loads(raw)
    assert [row["id"] for row in doc["families"]["tag"]] == [10, 20, 30]
    assert doc["families"]["genre"] == []


def test_bundled_snapshot_is_valid() -> None:
    snapshot = parse_snapshot(load_bundled_snapshot())
    tags = {record.id: record.name for record in snapshot.records[Family.TAG]}
    assert tags[3964] == "Co-op"
    assert all(count > 0 for count in snapshot.counts().values())
