"""
Tenant management API.
"""

from typing import Any, Dict, Optional

from ..models import Tenant, ListTenantsResponse
from .http import PermifyHttpService, path_segment


class TenancyService(PermifyHttpService):
    """Client for Permify's tenancy endpoints."""

    logger_name = "permify.tenancy"

    async def create_tenant(self, tenant_id: str, name: Optional[str] = None) -> Tenant:
        data = await self._post("/v1/tenants", {"id": tenant_id, "name": name or tenant_id})
        self.logger.info("Tenant created", tenant_id=tenant_id)
        return Tenant.model_validate(data.get("tenant", data))

    async def delete_tenant(self, tenant_id: str) -> Dict[str, Any]:
        result = await self._delete(f"/v1/tenants/{path_segment(tenant_id)}")
        self.logger.info("Tenant deleted", tenant_id=tenant_id)
        return result

    async def list_tenants(self, page_size: int = 10, continuous_token: str = "") -> ListTenantsResponse:
        data = await self._post(
            "/v1/tenants/list",
            {"page_size": page_size, "continuous_token": continuous_token}
        )
        return ListTenantsResponse.model_validate(data)
