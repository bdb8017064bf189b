#!/usr/bin/env python3
"""Build the bundled catalog seed snapshot from raw Steam dumps.

Inputs (same shapes the store serves them in):
- tags:        JSON list of {"tagid": int, "name": str}
- genres:      JSON object {"<id>": "<name>"}
- categories:  JSON object {"<id>": "<name>"}

Writes src/steamdex/catalog/data/seed.json by default.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT / "src"))

from steamdex.catalog.models import Family
from steamdex.catalog.snapshot import build_snapshot, parse_snapshot
from steamdex.shared.logging import get_logger, setup_logging

DEFAULT_OUTPUT = PROJECT_ROOT / "src" / "steamdex" / "catalog" / "data" / "seed.json"

logger = get_logger("scripts.build_seed_snapshot")


def load_tag_list(payload: Any) -> List[Tuple[int, str]]:
    if not isinstance(payload, list):
        raise ValueError("tags payload is not a list")
    rows = []
    for item in payload:
        tag_id = item.get("tagid")
        name = item.get("name")
        if not isinstance(tag_id, int) or not isinstance(name, str):
            raise ValueError(f"tag entry malformed: {item!r}")
        rows.append((tag_id, name))
    return rows


def load_id_map(payload: Any, label: str) -> List[Tuple[int, str]]:
    # ids arrive as JSON object keys, i.e. strings
    if not isinstance(payload, dict):
        raise ValueError(f"{label} payload is not an object")
    rows = []
    for raw_id, name in payload.items():
        if not str(raw_id).isdigit() or not isinstance(name, str):
            raise ValueError(f"{label} entry malformed: {raw_id!r}: {name!r}")
        rows.append((int(raw_id), name))
    return rows


def build_from_files(tags_path: Path, genres_path: Path, categories_path: Path) -> bytes:
    families: Dict[Family, List[Tuple[int, str]]] = {
        Family.TAG: load_tag_list(json.loads(tags_path.read_text(encoding="utf-8"))),
        Family.GENRE: load_id_map(json.loads(genres_path.read_text(encoding="utf-8")), "genres"),
        Family.CATEGORY: load_id_map(json.loads(categories_path.read_text(encoding="utf-8")), "categories"),
    }
    raw = build_snapshot(families)
    # fail here rather than on a user's first run
    parse_snapshot(raw)
    return raw


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the catalog seed snapshot")
    parser.add_argument("--tags", type=Path, default=Path("assets/tags.popular.en.json"))
    parser.add_argument("--genres", type=Path, default=Path("assets/genres.json"))
    parser.add_argument("--categories", type=Path, default=Path("assets/categories.json"))
    parser.add_argument("-o", "--output", type=Path, default=DEFAULT_OUTPUT)
    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    setup_logging("INFO")
    args = parse_args(argv)
    raw = build_from_files(args.tags, args.genres, args.categories)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(raw)
    counts = parse_snapshot(raw).counts()
    logger.info("seed_snapshot_written", path=str(args.output), **{f.plural: n for f, n in counts.items()})
    return 0


if __name__ == "__main__":
    sys.exit(main())
