"""
Declarative permission policies and the registry that maps handlers to them.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

from shared.errors import ValidationError
from shared.logging import get_logger

HandlerRef = Union[str, Callable[..., Any], type]


@dataclass(frozen=True)
class PolicyMetadata:
    """What the permission gate checks for one handler or handler group.

    ``tenant`` is either a literal tenant id or a ``req.``-prefixed path into
    the request (``req.org.id``). When unset the request's ``tenant`` is used.
    """
    entity: str
    permission: str
    id_param: str = "id"
    subject_type: str = "user"
    context_fields: Tuple[str, ...] = field(default_factory=tuple)
    tenant: Optional[str] = None

    def __post_init__(self):
        if not self.entity or not self.permission:
            raise ValidationError(
                "Permission policy requires both entity and permission",
                details={"entity": self.entity, "permission": self.permission}
            )
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "context_fields", tuple(self.context_fields))
        object.__setattr__(self, "id_param", self.id_param or "id")
        object.__setattr__(self, "subject_type", self.subject_type or "user")


def handler_key(handler: HandlerRef) -> str:
    """Stable registry key for a handler function, class or explicit id."""
    if isinstance(handler, str):
        return handler
    module = getattr(handler, "__module__", None)
    qualname = getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None)
    if qualname is None:
        raise ValidationError(f"Cannot derive a handler id from {handler!r}")
    return f"{module}.{qualname}" if module else qualname


class PolicyRegistry:
    """Explicit two-level policy lookup: handler first, then group."""

    def __init__(self):
        self._handlers: Dict[str, PolicyMetadata] = {}
        self._groups: Dict[str, PolicyMetadata] = {}
        self.logger = get_logger("permify.policy")

    def register(self, handler: HandlerRef, metadata: PolicyMetadata) -> None:
        key = handler_key(handler)
        if key in self._handlers:
            self.logger.warning("Replacing handler policy", handler=key)
        self._handlers[key] = metadata

    def register_group(self, group: HandlerRef, metadata: PolicyMetadata) -> None:
        key = handler_key(group)
        if key in self._groups:
            self.logger.warning("Replacing group policy", group=key)
        self._groups[key] = metadata

    def require_permission(self, entity: str, permission: str, *, id_param: str = "id",
                           subject_type: str = "user", context_fields: Sequence[str] = (),
                           tenant: Optional[str] = None) -> Callable:
        """Decorator attaching a policy to a handler.

        Example::

            @router.get("/documents/{document_id}")
            @policies.require_permission("document", "view", id_param="document_id",
                                         context_fields=["organization"])
            async def get_document(document_id: str): ...
        """
        metadata = PolicyMetadata(
            entity=entity,
            permission=permission,
            id_param=id_param,
            subject_type=subject_type,
            context_fields=tuple(context_fields),
            tenant=tenant,
        )

        def decorator(handler: Callable) -> Callable:
            self.register(handler, metadata)
            return handler

        return decorator

    def lookup(self, handler: Optional[HandlerRef] = None,
               group: Optional[HandlerRef] = None) -> Optional[PolicyMetadata]:
        """Handler-level policy wins over group-level; None when neither exists."""
        metadata = self._handlers.get(_lookup_key(handler))
        if metadata is not None:
            return metadata
        return self._groups.get(_lookup_key(group))

    def __len__(self) -> int:
        return len(self._handlers) + len(self._groups)


def _lookup_key(handler: Optional[HandlerRef]) -> Optional[str]:
    # nothing can be registered under an underivable key, so it has no policy
    if handler is None:
        return None
    try:
        return handler_key(handler)
    except ValidationError:
        return None
