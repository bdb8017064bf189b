"""Local catalog of Steam tags, genres and categories.

The catalog (record store + text index) is installed once from a seed
snapshot and is read-only afterwards.
"""

from .models import CatalogRecord, Family, Page
from .repository import CatalogRepository
from .seed import install_snapshot, load_bundled_snapshot, seed_if_absent

__all__ = [
    "CatalogRecord",
    "CatalogRepository",
    "Family",
    "Page",
    "install_snapshot",
    "load_bundled_snapshot",
    "seed_if_absent",
]
