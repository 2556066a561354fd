"""
Adapters package for the Permify service.

Contains the HTTP client wrappers for the Permify API. These adapters
encapsulate:

- Base URL, bearer authentication and timeouts (``PermifyClient``)
- Request shapes for each endpoint family
- Error handling that maps transport failures to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .client import PermifyClient, build_http_client
from .permission_service import PermissionService
from .schema_service import SchemaService
from .data_service import DataService
from .bundle_service import BundleService
from .tenancy_service import TenancyService
from .watch_service import WatchService

__all__ = [
    "PermifyClient",
    "build_http_client",
    "PermissionService",
    "SchemaService",
    "DataService",
    "BundleService",
    "TenancyService",
    "WatchService",
]
