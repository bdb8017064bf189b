"""Error taxonomy shared by the catalog, the detail cache and the SDK.

Every error carries a stable ``kind`` code that ends up verbatim in the
``error.kind`` field of an envelope.
"""

from __future__ import annotations


class SteamdexError(Exception):
    """Base exception for all steamdex failures."""

    kind = "INTERNAL"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(SteamdexError):
    """Unknown identifier (app, vanity name, ...)."""

    kind = "NOT_FOUND"


class InvalidArgument(SteamdexError):
    """Malformed family, query or pagination parameters."""

    kind = "INVALID_ARGUMENT"


class StorageFault(SteamdexError):
    """Catalog or cache storage is corrupt, unreadable or unwritable."""

    kind = "STORAGE_FAULT"


class FetchFailure(SteamdexError):
    """An external call failed, timed out or returned an unusable document."""

    kind = "FETCH_FAILURE"


class Unauthorized(FetchFailure):
    kind = "UNAUTHORIZED"


class RateLimited(FetchFailure):
    kind = "RATE_LIMITED"


class Internal(SteamdexError):
    """Invariant violation inside steamdex itself."""

    kind = "INTERNAL"


__all__ = [
    "FetchFailure",
    "Internal",
    "InvalidArgument",
    "NotFound",
    "RateLimited",
    "SteamdexError",
    "StorageFault",
    "Unauthorized",
]
