from .api_client import ApiClient, ApiError, AuthenticationRequired
from .catalog_view import CatalogViewModel, FilterSpec, apply_pipeline
from .configuration_store import ConfigurationStore
from .optimistic import LogNotifier, RecordingNotifier, attempt

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthenticationRequired",
    "CatalogViewModel",
    "ConfigurationStore",
    "FilterSpec",
    "LogNotifier",
    "RecordingNotifier",
    "apply_pipeline",
    "attempt",
]
