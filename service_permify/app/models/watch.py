"""
Watch stream models.

Permify streams one JSON object per line; each object either carries a
``result`` with the changes since ``snap_token`` or an ``error``.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WatchChangesRequest(BaseModel):
    tenant_id: str
    snap_token: str = ""


class WatchPermissionsFilter(BaseModel):
    """Narrow a change stream to tuples of one entity type and relation."""
    tenant_id: str
    entity_type: str
    permission: str
    snap_token: str = ""


class DataChange(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    operation: str = "OPERATION_UNSPECIFIED"
    tuple_: Optional[Dict[str, Any]] = Field(default=None, alias="tuple")
    attribute: Optional[Dict[str, Any]] = None

    def matches(self, entity_type: str, relation: str) -> bool:
        if not self.tuple_:
            return False
        entity = self.tuple_.get("entity") or {}
        return entity.get("type") == entity_type and self.tuple_.get("relation") == relation


class WatchChanges(BaseModel):
    model_config = ConfigDict(extra="allow")

    snap_token: str = ""
    data_changes: List[DataChange] = Field(default_factory=list)


class WatchResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    changes: WatchChanges = Field(default_factory=WatchChanges)


class WatchError(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: int
    message: str
    details: List[Any] = Field(default_factory=list)


class WatchChangesResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    result: Optional[WatchResult] = None
    error: Optional[WatchError] = None
