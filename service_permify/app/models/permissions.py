"""
Permission API models: check, expand and lookups.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

CHECK_RESULT_ALLOWED = "CHECK_RESULT_ALLOWED"
DEFAULT_DEPTH = 20


@dataclass
class AccessDecision:
    """Outcome of a single permission check."""
    allowed: bool
    metadata: Dict[str, Any] = field(default_factory=dict)


class _ConsistencyMixin(BaseModel):
    """Snapshot/schema pinning accepted by Permify read endpoints."""
    snap_token: str = Field(default="", description="Snapshot token for consistency")
    schema_version: str = Field(default="", description="Schema version to evaluate against")

    def _metadata(self, **extra: Any) -> Dict[str, Any]:
        metadata = {
            "snap_token": self.snap_token,
            "schema_version": self.schema_version,
        }
        metadata.update(extra)
        return metadata


class CheckAccessRequest(_ConsistencyMixin):
    """Request model for a permission check."""
    tenant_id: str = Field(..., description="Tenant ID")
    entity_type: str = Field(..., description="Entity type")
    entity_id: str = Field(..., description="Entity ID")
    permission: str = Field(..., description="Permission to check")
    subject_type: str = Field(default="user", description="Subject type")
    subject_id: str = Field(..., description="Subject ID")
    context: Dict[str, Any] = Field(default_factory=dict, description="Contextual data")
    depth: int = Field(default=DEFAULT_DEPTH, description="Maximum evaluation depth")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "metadata": self._metadata(depth=self.depth),
            "entity": {"type": self.entity_type, "id": self.entity_id},
            "permission": self.permission,
            "subject": {"type": self.subject_type, "id": self.subject_id},
            "context": {"tuples": [], "attributes": [], "data": self.context},
        }


class CheckAccessResponse(BaseModel):
    """Response model for a permission check."""
    model_config = ConfigDict(extra="allow")

    can: str = Field(..., description="Raw Permify check result")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Check metadata")

    @property
    def allowed(self) -> bool:
        return self.can == CHECK_RESULT_ALLOWED


class ExpandPermissionsRequest(_ConsistencyMixin):
    """Request model for expanding a permission tree."""
    tenant_id: str = Field(..., description="Tenant ID")
    entity_type: str = Field(..., description="Entity type")
    entity_id: str = Field(..., description="Entity ID")
    permission: Optional[str] = Field(default=None, description="Permission or relation to expand")

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "metadata": self._metadata(),
            "entity": {"type": self.entity_type, "id": self.entity_id},
        }
        if self.permission:
            payload["permission"] = self.permission
        return payload


class LookupEntityRequest(_ConsistencyMixin):
    """Which entities of a type can the subject access with a permission."""
    tenant_id: str
    entity_type: str
    permission: str
    subject_type: str = "user"
    subject_id: str
    subject_relation: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)
    depth: int = DEFAULT_DEPTH

    def to_payload(self) -> Dict[str, Any]:
        subject: Dict[str, Any] = {"type": self.subject_type, "id": self.subject_id}
        if self.subject_relation:
            subject["relation"] = self.subject_relation
        return {
            "metadata": self._metadata(depth=self.depth),
            "entity_type": self.entity_type,
            "permission": self.permission,
            "subject": subject,
            "context": {"tuples": [], "attributes": [], "data": self.context},
        }


class LookupEntityResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    entity_ids: List[str] = Field(default_factory=list)
    continuous_token: Optional[str] = None


class LookupSubjectRequest(_ConsistencyMixin):
    """Which subjects of a type hold a permission on an entity."""
    tenant_id: str
    entity_type: str
    entity_id: str
    permission: str
    subject_type: str = "user"
    subject_relation: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        subject_reference: Dict[str, Any] = {"type": self.subject_type}
        if self.subject_relation:
            subject_reference["relation"] = self.subject_relation
        return {
            "metadata": self._metadata(),
            "entity": {"type": self.entity_type, "id": self.entity_id},
            "permission": self.permission,
            "subject_reference": subject_reference,
            "context": {"tuples": [], "attributes": [], "data": self.context},
        }


class LookupSubjectResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    subject_ids: List[str] = Field(default_factory=list)
    continuous_token: Optional[str] = None


class SubjectPermissionRequest(_ConsistencyMixin):
    """List every permission a subject holds on one entity."""
    tenant_id: str
    entity_type: str
    entity_id: str
    subject_type: str = "user"
    subject_id: str
    depth: int = DEFAULT_DEPTH

    def to_payload(self) -> Dict[str, Any]:
        return {
            "metadata": self._metadata(depth=self.depth, only_permission=False),
            "entity": {"type": self.entity_type, "id": self.entity_id},
            "subject": {"type": self.subject_type, "id": self.subject_id},
        }


class SubjectPermissionResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    results: Dict[str, str] = Field(default_factory=dict)

    @property
    def permissions(self) -> List[str]:
        """Names of the permissions that evaluated to allowed."""
        return sorted(name for name, result in self.results.items() if result == CHECK_RESULT_ALLOWED)
