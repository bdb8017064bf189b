"""Catalog installation from a seed snapshot.

Install never writes to the runtime path directly: the catalog is built in a
temporary sibling file and moved into place with ``os.replace`` once it is
complete, so readers either see the previous catalog or the new one.
"""

from __future__ import annotations

import os
import sqlite3
import tempfile
import time
from importlib import resources
from pathlib import Path
from typing import Optional

from ..errors import StorageFault
from ..shared.logging import get_logger
from .db import run_in_transaction
from .snapshot import SNAPSHOT_FORMAT, Snapshot, parse_snapshot
from .text_index import index_entry

logger = get_logger("catalog.seed")

BUNDLED_SNAPSHOT = "data/seed.json"

CATALOG_SCHEMA = """
CREATE TABLE catalog_records(
    family TEXT NOT NULL,
    id INTEGER NOT NULL,
    name TEXT NOT NULL,
    PRIMARY KEY (family, id)
);
CREATE VIRTUAL TABLE name_index USING fts5(
    family UNINDEXED,
    record_id UNINDEXED,
    name_len UNINDEXED,
    compact,
    tokenize = 'trigram'
);
CREATE TABLE catalog_meta(
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


def load_bundled_snapshot() -> bytes:
    """Return the seed snapshot shipped with the package."""

    try:
        return resources.files("steamdex.catalog").joinpath(BUNDLED_SNAPSHOT).read_bytes()
    except OSError as exc:
        raise StorageFault(f"bundled seed snapshot is unreadable: {exc}") from exc


def _write_catalog(conn: sqlite3.Connection, snapshot: Snapshot) -> None:
    conn.executescript(CATALOG_SCHEMA)
    records = list(snapshot.iter_records())
    conn.executemany(
        "INSERT INTO catalog_records(family, id, name) VALUES (?, ?, ?)",
        [(record.family.value, record.id, record.name) for record in records],
    )
    # the index is derived from the rows above and nothing else
    conn.executemany(
        "INSERT INTO name_index(family, record_id, name_len, compact) VALUES (?, ?, ?, ?)",
        [
            (record.family.value, *index_entry(record.id, record.name))
            for record in records
        ],
    )
    meta = {
        "format": str(SNAPSHOT_FORMAT),
        "checksum": snapshot.checksum,
        "installed_at": str(int(time.time())),
    }
    for family, count in snapshot.counts().items():
        meta[f"count.{family.value}"] = str(count)
    conn.executemany("INSERT INTO catalog_meta(key, value) VALUES (?, ?)", sorted(meta.items()))


def install_snapshot(path: Path, raw: bytes) -> Snapshot:
    """Build a catalog from ``raw`` and atomically publish it at ``path``.

    Replaces any catalog already at ``path``. A corrupt snapshot raises
    StorageFault before anything is written.
    """

    snapshot = parse_snapshot(raw)
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        os.close(fd)
    except OSError as exc:
        raise StorageFault(f"cannot prepare catalog directory {path.parent}: {exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        run_in_transaction(tmp_path, lambda conn: _write_catalog(conn, snapshot))
        os.replace(tmp_path, path)
    except OSError as exc:
        raise StorageFault(f"cannot publish catalog at {path}: {exc}") from exc
    finally:
        tmp_path.unlink(missing_ok=True)

    logger.info(
        "catalog_installed",
        path=str(path),
        checksum=snapshot.checksum,
        **{family.plural: count for family, count in snapshot.counts().items()},
    )
    return snapshot


def seed_if_absent(path: Path, snapshot: Optional[bytes] = None) -> bool:
    """Install the catalog unless one already exists at ``path``.

    Returns True when a catalog was installed. ``snapshot`` defaults to the
    bundled seed.
    """

    path = Path(path)
    if path.exists():
        logger.debug("catalog_present", path=str(path))
        return False
    raw = snapshot if snapshot is not None else load_bundled_snapshot()
    install_snapshot(path, raw)
    return True


__all__ = ["CATALOG_SCHEMA", "install_snapshot", "load_bundled_snapshot", "seed_if_absent"]
