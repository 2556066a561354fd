"""
Permify access package.

Wraps the Permify authorization API and gates FastAPI handlers on its
permission checks:
- Adapters: typed clients for tenancy, schemas, relationships, permissions,
  bundles and watch streams (``app.adapters``)
- Permission gate: policy registry, request context extraction and the
  allow/deny decision (``app.domain``)

Structure:
- app.main: FastAPI service wiring, health check and lifecycle.
- app.adapters: HTTP clients for the Permify API.
- app.models: Request/response models.
- app.domain: Permission gate and its helpers.
"""

from .adapters import PermifyClient
from .domain import GateState, PermissionGate, PolicyMetadata, PolicyRegistry

__all__ = [
    "PermifyClient",
    "GateState",
    "PermissionGate",
    "PolicyMetadata",
    "PolicyRegistry",
]
