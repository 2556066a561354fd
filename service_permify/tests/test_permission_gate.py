"""
Unit tests for PermissionGate.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx
import pytest
from unittest.mock import AsyncMock

from prometheus_client import CollectorRegistry

from service_permify.app.adapters import PermissionService
from service_permify.app.domain import GateState, PermissionGate, PolicyMetadata, PolicyRegistry
from service_permify.app.models import AccessDecision
from shared.errors import AccessDeniedError, ExternalServiceError
from shared.metrics import MetricsCollector


async def show_document():
    return {"document": "doc-1"}


@dataclass
class Member:
    id: str
    org_id: str


class ExportEndpoint:
    async def __call__(self):
        return {"export": True}


class TestPermissionGate:
    """Test cases for PermissionGate."""

    @pytest.fixture
    def permissions(self):
        """Mock Permify permission service."""
        mock = AsyncMock()
        mock.check = AsyncMock(return_value=AccessDecision(allowed=True, metadata={"check_count": 1}))
        return mock

    @pytest.fixture
    def registry(self):
        """Registry with a policy on show_document."""
        registry = PolicyRegistry()
        registry.register(show_document, PolicyMetadata(
            entity="document",
            permission="view",
            id_param="documentId",
            context_fields=("org.id", "role"),
        ))
        return registry

    @pytest.fixture
    def gate(self, permissions, registry):
        """Create PermissionGate instance."""
        metrics = MetricsCollector("permify", CollectorRegistry())
        return PermissionGate(permissions, registry, metrics=metrics)

    @pytest.fixture
    def mock_request(self):
        """Request carrying everything the policy needs."""
        return {
            "params": {"documentId": "doc-1"},
            "user": {"id": "u1"},
            "tenant": "t1",
            "org": {"id": "o1"},
            "role": "admin",
        }

    @pytest.mark.asyncio
    async def test_no_policy_passes_through(self, gate, permissions):
        """Test handlers without a policy run untouched with no remote call."""
        handler = AsyncMock(return_value="result")

        result = await gate.intercept("unprotected", None, {"params": {}}, handler)

        assert result == "result"
        handler.assert_awaited_once()
        permissions.check.assert_not_called()

    @pytest.mark.asyncio
    async def test_allowed_returns_handler_result(self, gate, permissions, mock_request):
        """Test an allowed check runs the handler and returns its result unchanged."""
        handler = AsyncMock(return_value={"document": "doc-1"})

        result = await gate.intercept(show_document, None, mock_request, handler)

        assert result == {"document": "doc-1"}
        handler.assert_awaited_once()
        permissions.check.assert_awaited_once_with(
            tenant_id="t1",
            entity_type="document",
            entity_id="doc-1",
            permission="view",
            subject_type="user",
            subject_id="u1",
            context={"userId": "u1", "org": {"id": "o1"}, "role": "admin"},
        )

    @pytest.mark.asyncio
    async def test_sync_handler(self, gate, mock_request):
        """Test plain callables are supported as the downstream handler."""
        result = await gate.intercept(show_document, None, mock_request, lambda: 42)

        assert result == 42

    @pytest.mark.asyncio
    async def test_handler_error_propagates(self, gate, mock_request):
        """Test errors raised by an allowed handler are not swallowed."""
        handler = AsyncMock(side_effect=KeyError("boom"))

        with pytest.raises(KeyError):
            await gate.intercept(show_document, None, mock_request, handler)

    @pytest.mark.asyncio
    async def test_missing_entity_id(self, gate, permissions, mock_request):
        """Test a request without the id parameter is denied without a remote call."""
        mock_request["params"] = {}
        handler = AsyncMock()

        with pytest.raises(AccessDeniedError) as exc_info:
            await gate.intercept(show_document, None, mock_request, handler)

        assert "missing entity id parameter" in exc_info.value.message
        assert exc_info.value.state == GateState.MISSING_ENTITY_ID
        permissions.check.assert_not_called()
        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_entity_id(self, gate, permissions, mock_request):
        """Test an empty id parameter counts as missing."""
        mock_request["params"] = {"documentId": ""}

        with pytest.raises(AccessDeniedError) as exc_info:
            await gate.authorize(show_document, None, mock_request)

        assert exc_info.value.state == GateState.MISSING_ENTITY_ID
        permissions.check.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_subject(self, gate, permissions, mock_request):
        """Test an unauthenticated request is denied without a remote call."""
        mock_request["user"] = None

        with pytest.raises(AccessDeniedError) as exc_info:
            await gate.authorize(show_document, None, mock_request)

        assert exc_info.value.message == "subject not authenticated"
        assert exc_info.value.state == GateState.MISSING_SUBJECT
        permissions.check.assert_not_called()

    @pytest.mark.asyncio
    async def test_subject_falls_back_to_sub(self, gate, permissions, mock_request):
        """Test user.sub is used when user.id is absent."""
        mock_request["user"] = {"sub": "oidc-42"}

        await gate.authorize(show_document, None, mock_request)

        assert permissions.check.await_args.kwargs["subject_id"] == "oidc-42"

    @pytest.mark.asyncio
    async def test_missing_tenant(self, gate, permissions, mock_request):
        """Test a request with no resolvable tenant is denied without a remote call."""
        del mock_request["tenant"]

        with pytest.raises(AccessDeniedError) as exc_info:
            await gate.authorize(show_document, None, mock_request)

        assert exc_info.value.message == "tenant id not provided"
        assert exc_info.value.state == GateState.MISSING_TENANT
        permissions.check.assert_not_called()

    @pytest.mark.asyncio
    async def test_tenant_from_request_path(self, gate, registry, permissions, mock_request):
        """Test a req.-prefixed tenant is read from the request."""
        registry.register(show_document, PolicyMetadata(
            entity="document", permission="view", id_param="documentId", tenant="req.org.id"
        ))

        await gate.authorize(show_document, None, mock_request)

        assert permissions.check.await_args.kwargs["tenant_id"] == "o1"

    @pytest.mark.asyncio
    async def test_literal_tenant(self, gate, registry, permissions, mock_request):
        """Test a literal tenant overrides the request's tenant."""
        registry.register(show_document, PolicyMetadata(
            entity="document", permission="view", id_param="documentId", tenant="literal-tenant"
        ))

        await gate.authorize(show_document, None, mock_request)

        assert permissions.check.await_args.kwargs["tenant_id"] == "literal-tenant"

    @pytest.mark.asyncio
    async def test_denied(self, gate, permissions, mock_request):
        """Test a negative decision denies with permission and entity in the message."""
        permissions.check.return_value = AccessDecision(allowed=False)
        handler = AsyncMock()

        with pytest.raises(AccessDeniedError) as exc_info:
            await gate.intercept(show_document, None, mock_request, handler)

        assert exc_info.value.message == "permission denied: view on document:doc-1"
        assert exc_info.value.state == GateState.DENIED
        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_check_failure_is_generic_and_not_retried(self, gate, permissions, mock_request):
        """Test a transport failure becomes a generic denial after a single call."""
        permissions.check.side_effect = ExternalServiceError(
            service="permify",
            message="Unexpected status 500",
            details={"body": "internal stack trace"}
        )
        handler = AsyncMock()

        with pytest.raises(AccessDeniedError) as exc_info:
            await gate.intercept(show_document, None, mock_request, handler)

        assert exc_info.value.message == "error checking permissions"
        assert exc_info.value.state == GateState.CHECK_FAILED
        assert "internal stack trace" not in str(exc_info.value.to_response().model_dump())
        assert exc_info.value.__cause__ is None
        assert permissions.check.await_count == 1
        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_denied(self, gate, permissions, mock_request):
        """Test any exception from the facade results in a denial."""
        permissions.check.side_effect = RuntimeError("connection reset")

        with pytest.raises(AccessDeniedError) as exc_info:
            await gate.authorize(show_document, None, mock_request)

        assert exc_info.value.state == GateState.CHECK_FAILED

    @pytest.mark.asyncio
    async def test_group_policy(self, permissions, mock_request):
        """Test a group-level policy gates handlers without their own policy."""
        registry = PolicyRegistry()
        registry.register_group("documents", PolicyMetadata(entity="folder", permission="list"))
        gate = PermissionGate(permissions, registry, metrics=MetricsCollector("permify", CollectorRegistry()))
        mock_request["params"] = {"id": "f1"}

        state = await gate.authorize("any.handler", "documents", mock_request)

        assert state == GateState.ALLOWED
        kwargs = permissions.check.await_args.kwargs
        assert kwargs["entity_type"] == "folder"
        assert kwargs["entity_id"] == "f1"
        assert kwargs["permission"] == "list"

    @pytest.mark.asyncio
    async def test_custom_subject_type(self, gate, registry, permissions, mock_request):
        """Test the policy's subject type is forwarded."""
        registry.register(show_document, PolicyMetadata(
            entity="document", permission="view", id_param="documentId", subject_type="service"
        ))

        await gate.authorize(show_document, None, mock_request)

        assert permissions.check.await_args.kwargs["subject_type"] == "service"

    @pytest.mark.asyncio
    async def test_decisions_are_counted(self, gate, permissions, mock_request):
        """Test gate outcomes are recorded as metrics."""
        counter = gate.metrics.get_metric("permission_checks_total")

        await gate.authorize(show_document, None, mock_request)
        permissions.check.return_value = AccessDecision(allowed=False)
        with pytest.raises(AccessDeniedError):
            await gate.authorize(show_document, None, mock_request)

        assert counter.labels(outcome="allowed")._value.get() == 1
        assert counter.labels(outcome="denied")._value.get() == 1

    @pytest.mark.asyncio
    async def test_unnamed_callable_passes_through(self, gate, permissions):
        """Test callable-instance endpoints without a policy pass through."""
        state = await gate.authorize(ExportEndpoint(), None, {"params": {}})

        assert state == GateState.PASS
        permissions.check.assert_not_called()


class TestPermissionGateWithPermify:
    """Gate over the real permission service and a mocked Permify server."""

    @pytest.fixture
    def sent(self):
        """Check request bodies received by the mock server."""
        return []

    @pytest.fixture
    def gate(self, sent):
        def handler(request):
            sent.append(json.loads(request.content))
            return httpx.Response(200, json={"can": "CHECK_RESULT_ALLOWED"})

        http_client = httpx.AsyncClient(
            base_url="http://permify.test:3476",
            transport=httpx.MockTransport(handler)
        )
        registry = PolicyRegistry()
        registry.register(show_document, PolicyMetadata(
            entity="document",
            permission="view",
            id_param="documentId",
            context_fields=("user", "session.started_at"),
        ))
        return PermissionGate(
            PermissionService(http_client),
            registry,
            metrics=MetricsCollector("permify", CollectorRegistry())
        )

    @pytest.mark.asyncio
    async def test_object_and_datetime_context(self, gate, sent):
        """Test object and datetime request values reach Permify as JSON."""
        request = {
            "params": {"documentId": "doc-1"},
            "user": Member(id="u1", org_id="o1"),
            "tenant": "t1",
            "session": {"started_at": datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)},
        }

        state = await gate.authorize(show_document, None, request)

        assert state == GateState.ALLOWED
        assert sent[0]["subject"] == {"type": "user", "id": "u1"}
        assert sent[0]["context"]["data"] == {
            "userId": "u1",
            "user": {"id": "u1", "org_id": "o1"},
            "session": {"started_at": "2024-05-01T12:30:00+00:00"},
        }
