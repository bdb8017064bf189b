from .details import DetailService
from .library import LibraryService
from .lookup import CatalogLookupService

__all__ = ["CatalogLookupService", "DetailService", "LibraryService"]
