"""steamdex: local Steam catalog lookups and cached app details."""

__version__ = "1.0.0"

__all__ = ["__version__"]
