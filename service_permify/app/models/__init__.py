"""
Request and response models for the Permify HTTP API.

Each request model knows how to render itself into the JSON body Permify
expects (``to_payload``); responses are parsed with ``model_validate`` and
tolerate fields this package does not model.
"""

from .common import EntityRef, parse_entity_ref
from .permissions import (
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
    CHECK_RESULT_ALLOWED,
)
from .schema import (
    WriteSchemaRequest,
    WriteSchemaResponse,
    ReadSchemaRequest,
    ListSchemasRequest,
    ListSchemasResponse,
    SchemaPartial,
    PartialUpdateSchemaRequest,
)
from .data import (
    RelationSubject,
    WriteDataRequest,
    DeleteRelationshipRequest,
    ReadRelationshipsRequest,
    ReadRelationshipsResponse,
    LookupSubjectsRequest,
    LookupResourcesRequest,
)
from .bundle import BundleOperation, DataBundle, WriteBundleRequest, RunBundleRequest
from .tenancy import Tenant, ListTenantsResponse
from .watch import (
    DataChange,
    WatchChangesRequest,
    WatchChangesResponse,
    WatchPermissionsFilter,
)

__all__ = [
    "EntityRef",
    "parse_entity_ref",
    "AccessDecision",
    "CheckAccessRequest",
    "CheckAccessResponse",
    "ExpandPermissionsRequest",
    "LookupEntityRequest",
    "LookupEntityResponse",
    "LookupSubjectRequest",
    "LookupSubjectResponse",
    "SubjectPermissionRequest",
    "SubjectPermissionResponse",
    "CHECK_RESULT_ALLOWED",
    "WriteSchemaRequest",
    "WriteSchemaResponse",
    "ReadSchemaRequest",
    "ListSchemasRequest",
    "ListSchemasResponse",
    "SchemaPartial",
    "PartialUpdateSchemaRequest",
    "RelationSubject",
    "WriteDataRequest",
    "DeleteRelationshipRequest",
    "ReadRelationshipsRequest",
    "ReadRelationshipsResponse",
    "LookupSubjectsRequest",
    "LookupResourcesRequest",
    "BundleOperation",
    "DataBundle",
    "WriteBundleRequest",
    "RunBundleRequest",
    "Tenant",
    "ListTenantsResponse",
    "DataChange",
    "WatchChangesRequest",
    "WatchChangesResponse",
    "WatchPermissionsFilter",
]
