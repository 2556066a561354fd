"""
Relationship (data) API.
"""

from typing import Any, Dict

from ..models import (
    WriteDataRequest,
    DeleteRelationshipRequest,
    ReadRelationshipsRequest,
    ReadRelationshipsResponse,
    LookupSubjectsRequest,
    LookupResourcesRequest,
)
from .http import PermifyHttpService, tenant_path


class DataService(PermifyHttpService):
    """Client for Permify's relationship endpoints."""

    logger_name = "permify.data"

    async def write_data(self, request: WriteDataRequest) -> Dict[str, Any]:
        """Write a single relationship tuple.

        Returns Permify's response, which carries the ``snap_token`` of the
        write for read-your-writes checks.
        """
        payload = request.to_payload()
        result = await self._post(tenant_path(request.tenant_id, "relationships/write"), payload)
        self.logger.info(
            "Relationship written",
            tenant_id=request.tenant_id,
            entity=request.entity,
            relation=request.subject.relation,
            subject=f"{request.subject.type}:{request.subject.id}"
        )
        return result

    async def delete_relationship(self, request: DeleteRelationshipRequest) -> Dict[str, Any]:
        result = await self._post(
            tenant_path(request.tenant_id, "relationships/delete"),
            request.to_payload()
        )
        self.logger.info(
            "Relationships deleted",
            tenant_id=request.tenant_id,
            entity=f"{request.entity}:{request.id}",
            relation=request.relation
        )
        return result

    async def read_relationships(self, request: ReadRelationshipsRequest) -> ReadRelationshipsResponse:
        data = await self._post(tenant_path(request.tenant_id, "relationships/read"), request.to_payload())
        return ReadRelationshipsResponse.model_validate(data)

    async def lookup_subjects(self, request: LookupSubjectsRequest) -> Dict[str, Any]:
        return await self._post(
            tenant_path(request.tenant_id, "relationships/lookup/subjects"),
            request.to_payload()
        )

    async def lookup_resources(self, request: LookupResourcesRequest) -> Dict[str, Any]:
        return await self._post(
            tenant_path(request.tenant_id, "permissions/lookup/resources"),
            request.to_payload()
        )
