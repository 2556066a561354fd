"""
Tenant models.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Tenant(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    created_at: Optional[str] = None


class ListTenantsResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    tenants: List[Tenant] = Field(default_factory=list)
    continuous_token: Optional[str] = None
