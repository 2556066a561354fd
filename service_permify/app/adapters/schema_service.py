"""
Schema API.
"""

from typing import Any, Dict

from ..models import (
    WriteSchemaRequest,
    WriteSchemaResponse,
    ReadSchemaRequest,
    ListSchemasRequest,
    ListSchemasResponse,
    PartialUpdateSchemaRequest,
)
from .http import PermifyHttpService, tenant_path


class SchemaService(PermifyHttpService):
    """Client for Permify's schema endpoints."""

    logger_name = "permify.schemas"

    async def write_schema(self, request: WriteSchemaRequest) -> WriteSchemaResponse:
        data = await self._post(tenant_path(request.tenant_id, "schemas/write"), request.to_payload())
        result = WriteSchemaResponse.model_validate(data)
        self.logger.info(
            "Schema written",
            tenant_id=request.tenant_id,
            schema_version=result.schema_version
        )
        return result

    async def read_schema(self, request: ReadSchemaRequest) -> Dict[str, Any]:
        """Return the schema at ``schema_version`` (head when empty)."""
        return await self._post(tenant_path(request.tenant_id, "schemas/read"), request.to_payload())

    async def list_schemas(self, request: ListSchemasRequest) -> ListSchemasResponse:
        data = await self._post(tenant_path(request.tenant_id, "schemas/list"), request.to_payload())
        return ListSchemasResponse.model_validate(data)

    async def partial_update_schema(self, request: PartialUpdateSchemaRequest) -> WriteSchemaResponse:
        data = await self._post(
            tenant_path(request.tenant_id, "schemas/partial-write"),
            request.to_payload()
        )
        result = WriteSchemaResponse.model_validate(data)
        self.logger.info(
            "Schema partially updated",
            tenant_id=request.tenant_id,
            entities=sorted(request.partials),
            schema_version=result.schema_version
        )
        return result
