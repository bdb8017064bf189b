from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, TypeVar

from ..errors import StorageFault

T = TypeVar("T")


def open_connection(path: Path, *, read_only: bool = False) -> sqlite3.Connection:
    """Open a SQLite connection that may be shared across threads."""

    try:
        if read_only:
            uri = f"{Path(path).resolve().as_uri()}?mode=ro"
            return sqlite3.connect(uri, uri=True, check_same_thread=False)
        return sqlite3.connect(str(path), check_same_thread=False)
    except sqlite3.Error as exc:
        raise StorageFault(f"cannot open database at {path}: {exc}") from exc


@contextmanager
def get_connection(path: Path, *, read_only: bool = False) -> Iterator[sqlite3.Connection]:
    conn = open_connection(path, read_only=read_only)
    try:
        yield conn
    except sqlite3.Error as exc:
        raise StorageFault(f"database error at {path}: {exc}") from exc
    finally:
        conn.close()


def run_in_transaction(path: Path, fn: Callable[[sqlite3.Connection], T]) -> T:
    with get_connection(path) as conn:
        with conn:
            return fn(conn)


__all__ = ["get_connection", "open_connection", "run_in_transaction"]
