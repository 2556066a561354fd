"""
Data bundle API.
"""

from typing import Any, Dict

from ..models import WriteBundleRequest, RunBundleRequest
from .http import PermifyHttpService, path_segment, tenant_path


class BundleService(PermifyHttpService):
    """Client for Permify's bundle endpoints."""

    logger_name = "permify.bundles"

    async def write_bundle(self, request: WriteBundleRequest) -> Dict[str, Any]:
        result = await self._post(tenant_path(request.tenant_id, "bundles/write"), request.to_payload())
        self.logger.info(
            "Bundles written",
            tenant_id=request.tenant_id,
            bundles=[bundle.name for bundle in request.bundles]
        )
        return result

    async def read_bundle(self, tenant_id: str, name: str) -> Dict[str, Any]:
        return await self._get(tenant_path(tenant_id, f"bundles/{path_segment(name)}"))

    async def delete_bundle(self, tenant_id: str, name: str) -> Dict[str, Any]:
        result = await self._delete(tenant_path(tenant_id, f"bundles/{path_segment(name)}"))
        self.logger.info("Bundle deleted", tenant_id=tenant_id, bundle=name)
        return result

    async def list_bundles(self, tenant_id: str, page: int = 1, size: int = 10) -> Dict[str, Any]:
        return await self._get(tenant_path(tenant_id, "bundles"), params={"page": page, "size": size})

    async def run_bundle(self, request: RunBundleRequest) -> Dict[str, Any]:
        """Execute a stored bundle with concrete arguments."""
        return await self._post(tenant_path(request.tenant_id, "data/run-bundle"), request.to_payload())
