from .appdetails import normalize_appdetails
from .client import StoreClient, WebApiClient
from .models import AppDetails, Label, OwnedGame

__all__ = ["AppDetails", "Label", "OwnedGame", "StoreClient", "WebApiClient", "normalize_appdetails"]
