import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest

from steamdex.catalog.models import Family
from steamdex.catalog.repository import CatalogRepository
from steamdex.catalog.seed import install_snapshot
from steamdex.catalog.snapshot import build_snapshot
from steamdex.config import get_settings
from steamdex.shared.logging import setup_logging

# route structlog through stdlib logging before any module logs
setup_logging("WARNING")

GENRES = [
    (1, "Action"),
    (2, "Strategy"),
    (3, "RPG"),
    (4, "Casual"),
    (9, "Racing"),
    (18, "Sports"),
    (23, "Indie"),
    (25, "Adventure"),
    (28, "Simulation"),
    (29, "Massively Multiplayer"),
    (37, "Free to Play"),
    (70, "Early Access"),
]

TAGS = [
    (19, "Action"),
    (21, "Adventure"),
    (492, "Indie"),
    (1662, "Survival"),
    (1685, "Cooperative"),
    (1774, "Shooter"),
    (3841, "Local Co-Op"),
    (3843, "Online Co-Op"),
    (3859, "Multiplayer"),
    (3964, "Co-op"),
    (4182, "Singleplayer"),
    (4508, "Co-op Campaign"),
    (1698, "Point & Click"),
    (3942, "Sci-fi"),
    (5537, "Puzzle Platformer"),
    (1664, "Puzzle"),
    (17894, "Cops & Robbers"),
]

CATEGORIES = [
    (1, "Multi-player"),
    (2, "Single-player"),
    (9, "Co-op"),
    (22, "Steam Achievements"),
    (38, "Online Co-op"),
]


@pytest.fixture
def snapshot_bytes() -> bytes:
    return build_snapshot({Family.TAG: TAGS, Family.GENRE: GENRES, Family.CATEGORY: CATEGORIES})


@pytest.fixture
def catalog_path(tmp_path: Path, snapshot_bytes: bytes) -> Path:
    path = tmp_path / "catalog.db"
    install_snapshot(path, snapshot_bytes)
    return path


@pytest.fixture
def repository(catalog_path: Path):
    repo = CatalogRepository(catalog_path)
    yield repo
    repo.close()


@pytest.fixture
def steamdex_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    monkeypatch.setenv("STEAMDEX_HOME", str(home))
    for name in ("STEAMDEX_CATALOG_DB", "STEAMDEX_CACHE_DB", "STEAM_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield home
    get_settings.cache_clear()
