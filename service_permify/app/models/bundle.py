"""
Data bundle models.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class BundleOperation(BaseModel):
    relationships_write: List[str] = Field(default_factory=list)
    relationships_delete: List[str] = Field(default_factory=list)
    attributes_write: List[str] = Field(default_factory=list)
    attributes_delete: List[str] = Field(default_factory=list)


class DataBundle(BaseModel):
    """A named, parameterised set of relationship/attribute operations."""
    name: str
    arguments: List[str] = Field(default_factory=list)
    operations: List[BundleOperation] = Field(default_factory=list)


class WriteBundleRequest(BaseModel):
    tenant_id: str
    bundles: List[DataBundle]

    def to_payload(self) -> Dict[str, Any]:
        return {"bundles": [bundle.model_dump() for bundle in self.bundles]}


class RunBundleRequest(BaseModel):
    tenant_id: str
    name: str
    arguments: Dict[str, str] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {"name": self.name, "arguments": self.arguments}
