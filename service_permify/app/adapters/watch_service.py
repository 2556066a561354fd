"""
Watch API: long-lived change streams.

Every method returns an async iterator. Iteration keeps the HTTP stream open;
breaking out of the loop (or calling ``aclose()``) closes it.
"""

from typing import Any, AsyncIterator, Dict, Optional

from ..models import WatchChangesRequest, WatchChangesResponse, WatchPermissionsFilter
from .http import PermifyHttpService, tenant_path


class WatchService(PermifyHttpService):
    """Client for Permify's watch endpoints."""

    logger_name = "permify.watch"

    async def watch_changes(self, request: WatchChangesRequest) -> AsyncIterator[WatchChangesResponse]:
        """Stream relationship and attribute changes after ``snap_token``."""
        path = tenant_path(request.tenant_id, "watch")
        async for message in self._stream(path, {"snap_token": request.snap_token}):
            yield WatchChangesResponse.model_validate(message)

    async def watch_permissions_by_filter(
        self, request: WatchPermissionsFilter
    ) -> AsyncIterator[WatchChangesResponse]:
        """Stream only the tuple changes for one entity type and relation.

        Messages without a result (errors, keep-alives) are passed through
        untouched so the consumer still sees them.
        """
        changes = self.watch_changes(
            WatchChangesRequest(tenant_id=request.tenant_id, snap_token=request.snap_token)
        )
        try:
            async for response in changes:
                if response.result is None:
                    yield response
                    continue

                kept = [
                    change for change in response.result.changes.data_changes
                    if change.matches(request.entity_type, request.permission)
                ]
                yield response.model_copy(update={
                    "result": response.result.model_copy(update={
                        "changes": response.result.changes.model_copy(update={"data_changes": kept})
                    })
                })
        finally:
            await changes.aclose()

    async def watch_relationships(self, tenant_id: str,
                                  snap_token: Optional[str] = None) -> AsyncIterator[Dict[str, Any]]:
        payload = {"metadata": {"snap_token": snap_token or ""}}
        async for message in self._stream(tenant_path(tenant_id, "relationships/watch"), payload):
            yield message

    async def watch_schema(self, tenant_id: str,
                           schema_version: Optional[str] = None) -> AsyncIterator[Dict[str, Any]]:
        payload = {"metadata": {"schema_version": schema_version or ""}}
        async for message in self._stream(tenant_path(tenant_id, "schemas/watch"), payload):
            yield message

    async def watch_permissions(
        self,
        tenant_id: str,
        entity_type: str,
        entity_id: str,
        permission: str,
        subject_type: str,
        subject_id: str,
        snap_token: Optional[str] = None,
        schema_version: Optional[str] = None,
    ) -> AsyncIterator[Dict[str, Any]]:
        """Stream check results for one entity/permission/subject triple."""
        payload = {
            "metadata": {
                "snap_token": snap_token or "",
                "schema_version": schema_version or "",
                "depth": 20,
            },
            "entity": {"type": entity_type, "id": entity_id},
            "permission": permission,
            "subject": {"type": subject_type, "id": subject_id},
        }
        async for message in self._stream(tenant_path(tenant_id, "permissions/watch"), payload):
            yield message
