"""
Domain utilities for the Permify service.

Holds the permission gate and the pieces it is built from: policy metadata
and its registry, and request field extraction.
"""

from .policy import PolicyMetadata, PolicyRegistry, handler_key
from .request_context import build_context, extract_field, resolve_tenant, SUBJECT_CONTEXT_KEY
from .permission_gate import GateState, PermissionChecker, PermissionGate, request_view

__all__ = [
    "PolicyMetadata",
    "PolicyRegistry",
    "handler_key",
    "build_context",
    "extract_field",
    "resolve_tenant",
    "SUBJECT_CONTEXT_KEY",
    "GateState",
    "PermissionChecker",
    "PermissionGate",
    "request_view",
]
