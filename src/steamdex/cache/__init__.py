from .detail_cache import CachedDocument, DetailCache

__all__ = ["CachedDocument", "DetailCache"]
