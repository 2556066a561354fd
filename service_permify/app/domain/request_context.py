"""
Request field extraction for the permission gate.

The gate sees a request as a nested mapping (``params``, ``user``, ``tenant``,
...). Paths are dotted strings; a missing step anywhere along a path yields
``None`` instead of raising.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional

from fastapi.encoders import jsonable_encoder

SUBJECT_CONTEXT_KEY = "userId"
TENANT_REQUEST_PREFIX = "req."

_SCALARS = (str, bytes, int, float, bool)


def _step(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key)
    if isinstance(value, (list, tuple)):
        if key.isdigit() and int(key) < len(value):
            return value[int(key)]
        return None
    if isinstance(value, _SCALARS) or key.startswith("_"):
        return None
    return getattr(value, key, None)


def extract_field(source: Any, path: str) -> Any:
    """Resolve ``a.b.c`` against ``source``; None as soon as a step is absent."""
    value = source
    for key in path.split("."):
        if value is None:
            return None
        value = _step(value, key)
    return value


def _assign(target: Dict[str, Any], keys: list, value: Any) -> None:
    current = target
    for key in keys[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            # last write wins over an earlier scalar at this position
            child = {}
            current[key] = child
        current = child
    current[keys[-1]] = value


def build_context(request: Any, subject_id: str, fields: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """Build the check context: the subject id plus each declared request field.

    ``["org.id", "role"]`` over ``{"org": {"id": "o1"}, "role": "admin"}``
    gives ``{"userId": subject_id, "org": {"id": "o1"}, "role": "admin"}``.
    Fields absent from the request are skipped. Values are converted to
    JSON-compatible copies (objects and dataclasses become dicts, datetimes
    ISO strings), so the request is never aliased or mutated.
    """
    context: Dict[str, Any] = {SUBJECT_CONTEXT_KEY: subject_id}
    for field in fields or ():
        value = extract_field(request, field)
        if value is None:
            continue
        _assign(context, field.split("."), jsonable_encoder(value))
    return context


def resolve_tenant(tenant: Optional[str], request: Any) -> Any:
    """Resolve the tenant id from a policy's ``tenant`` setting.

    ``req.``-prefixed values are paths into the request, other values are
    literal ids, and an unset value falls back to the request's ``tenant``.
    """
    if tenant and tenant.startswith(TENANT_REQUEST_PREFIX):
        return extract_field(request, tenant[len(TENANT_REQUEST_PREFIX):])
    if tenant:
        return tenant
    return extract_field(request, "tenant")
