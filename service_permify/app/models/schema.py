"""
Schema API models.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WriteSchemaRequest(BaseModel):
    """Request model for writing a new schema version."""
    tenant_id: str = Field(..., description="Tenant ID")
    definition: str = Field(..., description="Schema source in Permify DSL")

    def to_payload(self) -> Dict[str, Any]:
        return {"schema": self.definition}


class WriteSchemaResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    schema_version: str


class ReadSchemaRequest(BaseModel):
    tenant_id: str
    schema_version: str = ""

    def to_payload(self) -> Dict[str, Any]:
        return {"metadata": {"schema_version": self.schema_version}}


class ListSchemasRequest(BaseModel):
    tenant_id: str
    page_size: int = Field(default=10, ge=1)
    continuous_token: str = ""

    def to_payload(self) -> Dict[str, Any]:
        return {"page_size": self.page_size, "continuous_token": self.continuous_token}


class SchemaVersion(BaseModel):
    model_config = ConfigDict(extra="allow")

    version: str
    created_at: Optional[str] = None


class ListSchemasResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    head: str = ""
    schemas: List[SchemaVersion] = Field(default_factory=list)
    continuous_token: Optional[str] = None


class SchemaPartial(BaseModel):
    """Statement-level edits to one entity definition."""
    write: List[str] = Field(default_factory=list)
    delete: List[str] = Field(default_factory=list)
    update: List[str] = Field(default_factory=list)


class PartialUpdateSchemaRequest(BaseModel):
    """Request model for patching entity definitions without a full rewrite."""
    tenant_id: str
    schema_version: str = ""
    partials: Dict[str, SchemaPartial]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "metadata": {"schema_version": self.schema_version},
            "partials": {name: partial.model_dump() for name, partial in self.partials.items()},
        }
