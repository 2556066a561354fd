"""
Relationship (tuple) API models.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import parse_entity_ref


class RelationSubject(BaseModel):
    """Subject side of a relationship tuple."""
    id: str
    relation: str = Field(..., description="Relation the subject holds on the entity")
    type: str = "user"
    subject_relation: Optional[str] = None


class WriteDataRequest(BaseModel):
    """Write one relationship tuple: ``entity#relation@subject``."""
    tenant_id: str
    entity: str = Field(..., description="Entity reference, 'type:id'")
    subject: RelationSubject
    schema_version: str = ""

    def to_payload(self) -> Dict[str, Any]:
        entity = parse_entity_ref(self.entity)
        subject: Dict[str, Any] = {"type": self.subject.type, "id": self.subject.id}
        if self.subject.subject_relation:
            subject["relation"] = self.subject.subject_relation
        return {
            "metadata": {"schema_version": self.schema_version},
            "tuples": [{
                "entity": {"type": entity.type, "id": entity.id},
                "relation": self.subject.relation,
                "subject": subject,
            }],
        }


class DeleteRelationshipRequest(BaseModel):
    tenant_id: str
    entity: str = Field(..., description="Entity type")
    id: str = Field(..., description="Entity ID")
    relation: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "tuple_filter": {
                "entity": {"type": self.entity, "ids": [self.id]},
                "relation": self.relation,
            },
            "attribute_filter": {},
        }


class ReadRelationshipsRequest(BaseModel):
    tenant_id: str
    entity: str = Field(..., description="Entity type")
    id: str = Field(..., description="Entity ID")
    snap_token: str = ""
    page_size: int = Field(default=100, ge=1)
    continuous_token: str = ""

    def to_payload(self) -> Dict[str, Any]:
        return {
            "metadata": {"snap_token": self.snap_token},
            "filter": {"entity": {"type": self.entity, "ids": [self.id]}},
            "page_size": self.page_size,
            "continuous_token": self.continuous_token,
        }


class ReadRelationshipsResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    tuples: List[Dict[str, Any]] = Field(default_factory=list)
    continuous_token: Optional[str] = None


class LookupSubjectsRequest(BaseModel):
    """Subjects holding ``relation`` on an entity."""
    tenant_id: str
    entity: str
    id: str
    relation: str
    subject_type: str = "user"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "entity": {"type": self.entity, "id": self.id},
            "relation": self.relation,
            "subject_type": self.subject_type,
        }


class LookupResourcesRequest(BaseModel):
    """Entities of ``entity`` type on which ``subject`` holds ``permission``."""
    tenant_id: str
    permission: str
    entity: str = Field(..., description="Entity type")
    subject: str = Field(..., description="Subject reference, 'type:id' or a bare user id")
    context: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        subject = parse_entity_ref(self.subject, default_type="user")
        return {
            "permission": self.permission,
            "entity_type": self.entity,
            "subject": {"type": subject.type, "id": subject.id},
            "context": {"tuples": [], "attributes": [], "data": self.context},
        }
