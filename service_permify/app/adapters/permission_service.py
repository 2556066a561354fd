"""
Permission API: check, expand and lookups.
"""

from typing import Any, Dict, Optional

from pydantic import ValidationError as ModelValidationError

from shared.errors import ExternalServiceError

from ..models import (
    AccessDecision,
    CheckAccessRequest,
    CheckAccessResponse,
    ExpandPermissionsRequest,
    LookupEntityRequest,
    LookupEntityResponse,
    LookupSubjectRequest,
    LookupSubjectResponse,
    SubjectPermissionRequest,
    SubjectPermissionResponse,
)
from .http import PermifyHttpService, SERVICE_NAME, tenant_path


class PermissionService(PermifyHttpService):
    """Client for Permify's permission endpoints."""

    logger_name = "permify.permissions"

    async def check_access(self, request: CheckAccessRequest) -> CheckAccessResponse:
        """Ask whether a subject holds a permission on an entity."""
        data = await self._post(
            tenant_path(request.tenant_id, "permissions/check"),
            request.to_payload()
        )

        try:
            result = CheckAccessResponse.model_validate(data)
        except ModelValidationError as e:
            self.logger.error("Unexpected check response", error=str(e))
            raise ExternalServiceError(
                service=SERVICE_NAME,
                message="Malformed check response",
                details={"errors": e.errors(include_url=False)}
            ) from e

        self.logger.debug(
            "Permission checked",
            tenant_id=request.tenant_id,
            entity=f"{request.entity_type}:{request.entity_id}",
            permission=request.permission,
            can=result.can
        )
        return result

    async def check(self, *, tenant_id: str, entity_type: str, entity_id: str,
                    permission: str, subject_type: str, subject_id: str,
                    context: Optional[Dict[str, Any]] = None) -> AccessDecision:
        """Keyword form of ``check_access`` returning a bare decision."""
        result = await self.check_access(CheckAccessRequest(
            tenant_id=tenant_id,
            entity_type=entity_type,
            entity_id=entity_id,
            permission=permission,
            subject_type=subject_type,
            subject_id=subject_id,
            context=context or {},
        ))
        return AccessDecision(allowed=result.allowed, metadata=dict(result.metadata))

    async def expand_permissions(self, request: ExpandPermissionsRequest) -> Dict[str, Any]:
        """Return the raw expansion tree for a permission on an entity."""
        return await self._post(
            tenant_path(request.tenant_id, "permissions/expand"),
            request.to_payload()
        )

    async def lookup_entity(self, request: LookupEntityRequest) -> LookupEntityResponse:
        data = await self._post(
            tenant_path(request.tenant_id, "permissions/lookup-entity"),
            request.to_payload()
        )
        return LookupEntityResponse.model_validate(data)

    async def lookup_subject(self, request: LookupSubjectRequest) -> LookupSubjectResponse:
        data = await self._post(
            tenant_path(request.tenant_id, "permissions/lookup-subject"),
            request.to_payload()
        )
        return LookupSubjectResponse.model_validate(data)

    async def subject_permission(self, request: SubjectPermissionRequest) -> SubjectPermissionResponse:
        data = await self._post(
            tenant_path(request.tenant_id, "permissions/subject-permission"),
            request.to_payload()
        )
        return SubjectPermissionResponse.model_validate(data)
