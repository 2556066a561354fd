"""
Permission gate for request handlers.

The gate looks up the policy attached to a handler (or its group), pulls the
entity id, subject id and tenant id out of the request, asks Permify for a
decision and either lets the handler run or refuses with
``AccessDeniedError``. Every denial carries the ``GateState`` that caused it.
"""

import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Protocol

from fastapi import Request

from shared.errors import AccessDeniedError
from shared.logging import get_logger, set_user_context
from shared.metrics import MetricsCollector, get_metrics_collector

from ..models import AccessDecision
from .policy import HandlerRef, PolicyMetadata, PolicyRegistry
from .request_context import build_context, extract_field, resolve_tenant


class GateState(str, Enum):
    """Terminal outcomes of a gated request."""
    PASS = "pass"
    MISSING_ENTITY_ID = "missing_entity_id"
    MISSING_SUBJECT = "missing_subject"
    MISSING_TENANT = "missing_tenant"
    ALLOWED = "allowed"
    DENIED = "denied"
    CHECK_FAILED = "check_failed"


class PermissionChecker(Protocol):
    """Interface the gate needs from the Permify facade.

    ``PermissionService`` implements it; tests substitute an ``AsyncMock``.
    """

    async def check(self, *, tenant_id: str, entity_type: str, entity_id: str,
                    permission: str, subject_type: str, subject_id: str,
                    context: Dict[str, Any]) -> AccessDecision:
        ...


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


class PermissionGate:
    """Gate handlers on a Permify permission check."""

    def __init__(self, permissions: PermissionChecker, registry: Optional[PolicyRegistry] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.permissions = permissions
        self.registry = registry if registry is not None else PolicyRegistry()
        self.metrics = metrics or get_metrics_collector("permify")
        self.logger = get_logger("permify.gate")

    def _deny(self, state: GateState, message: str) -> AccessDeniedError:
        self.metrics.record_permission_decision(state.value)
        return AccessDeniedError(message, state=state)

    async def authorize(self, handler: Optional[HandlerRef], group: Optional[HandlerRef],
                        request: Mapping[str, Any]) -> GateState:
        """Decide whether the request may reach ``handler``.

        Returns ``GateState.PASS`` when no policy applies and
        ``GateState.ALLOWED`` when Permify allows; raises
        ``AccessDeniedError`` otherwise. At most one check call is made and
        it is never retried.
        """
        metadata = self.registry.lookup(handler, group)
        if metadata is None:
            self.metrics.record_permission_decision(GateState.PASS.value)
            return GateState.PASS

        params = request.get("params") or {}
        entity_id = params.get(metadata.id_param)
        if _is_missing(entity_id):
            self.logger.warning(
                "Entity id parameter not found in request params",
                id_param=metadata.id_param,
                entity=metadata.entity
            )
            raise self._deny(GateState.MISSING_ENTITY_ID, "missing entity id parameter")

        subject_id = extract_field(request, "user.id")
        if _is_missing(subject_id):
            subject_id = extract_field(request, "user.sub")
        if _is_missing(subject_id):
            self.logger.warning("Subject not found in request, is authentication configured?")
            raise self._deny(GateState.MISSING_SUBJECT, "subject not authenticated")

        tenant_id = resolve_tenant(metadata.tenant, request)
        if _is_missing(tenant_id):
            self.logger.warning(
                "Tenant id not found, set it on the policy or the request",
                tenant=metadata.tenant
            )
            raise self._deny(GateState.MISSING_TENANT, "tenant id not provided")

        entity_id, subject_id, tenant_id = str(entity_id), str(subject_id), str(tenant_id)
        set_user_context(user_id=subject_id, tenant_id=tenant_id)

        context = build_context(request, subject_id, metadata.context_fields)
        decision = await self._check(metadata, tenant_id, entity_id, subject_id, context)

        if not decision.allowed:
            self.logger.info(
                "Permission denied",
                entity=f"{metadata.entity}:{entity_id}",
                permission=metadata.permission,
                subject=f"{metadata.subject_type}:{subject_id}"
            )
            raise self._deny(
                GateState.DENIED,
                f"permission denied: {metadata.permission} on {metadata.entity}:{entity_id}"
            )

        self.metrics.record_permission_decision(GateState.ALLOWED.value)
        self.logger.debug(
            "Permission granted",
            entity=f"{metadata.entity}:{entity_id}",
            permission=metadata.permission
        )
        return GateState.ALLOWED

    async def _check(self, metadata: PolicyMetadata, tenant_id: str, entity_id: str,
                     subject_id: str, context: Dict[str, Any]) -> AccessDecision:
        try:
            with self.metrics.time_operation(
                "permission_check_duration_seconds",
                entity=metadata.entity,
                permission=metadata.permission
            ):
                return await self.permissions.check(
                    tenant_id=tenant_id,
                    entity_type=metadata.entity,
                    entity_id=entity_id,
                    permission=metadata.permission,
                    subject_type=metadata.subject_type,
                    subject_id=subject_id,
                    context=context,
                )
        except Exception as e:
            # the caller only ever sees the generic message
            self.logger.error(
                "Error checking permissions",
                error=str(e),
                error_type=type(e).__name__,
                entity=f"{metadata.entity}:{entity_id}",
                permission=metadata.permission,
                exc_info=True
            )
            raise self._deny(GateState.CHECK_FAILED, "error checking permissions") from None

    async def intercept(self, handler: Optional[HandlerRef], group: Optional[HandlerRef],
                        request: Mapping[str, Any], call_next: Callable[[], Any]) -> Any:
        """Run ``call_next`` if the gate lets the request through.

        The handler's result (or exception) is passed back unchanged.
        """
        await self.authorize(handler, group, request)
        result = call_next()
        if inspect.isawaitable(result):
            result = await result
        return result

    def guard(self, group: Optional[HandlerRef] = None) -> Callable[[Request], Awaitable[None]]:
        """FastAPI dependency enforcing the gate for the matched endpoint.

        Attach per route with ``dependencies=[Depends(gate.guard())]`` or per
        router with ``APIRouter(dependencies=[Depends(gate.guard("documents"))])``
        to make ``"documents"`` the group whose policy applies when the
        endpoint has none of its own.
        """

        async def permission_guard(request: Request) -> None:
            await self.authorize(request.scope.get("endpoint"), group, request_view(request))

        return permission_guard


def request_view(request: Request) -> Dict[str, Any]:
    """Read-only mapping of a Starlette request in the shape the gate expects.

    Everything the host stored on ``request.state`` (``user``, ``tenant``,
    ...) sits at the root next to ``params``, ``query`` and ``headers``.
    """
    # Starlette's State has no public way to enumerate its attributes
    view: Dict[str, Any] = dict(getattr(request.state, "_state", {}))
    view.setdefault("user", None)
    view.setdefault("tenant", None)
    view["params"] = dict(request.path_params)
    view["query"] = dict(request.query_params)
    view["headers"] = dict(request.headers)
    return view
