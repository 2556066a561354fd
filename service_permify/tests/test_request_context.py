"""
Unit tests for request field extraction, context building and tenant resolution.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from types import SimpleNamespace

from service_permify.app.domain.request_context import (
    build_context,
    extract_field,
    resolve_tenant,
)


class TestExtractField:
    """Test cases for extract_field."""

    def test_nested_path(self):
        """Test walking a nested mapping."""
        request = {"user": {"org": {"id": "o1"}}}

        assert extract_field(request, "user.org.id") == "o1"
        assert extract_field(request, "user.org") == {"id": "o1"}

    def test_missing_intermediate_returns_none(self):
        """Test that a missing step stops the walk silently."""
        request = {"user": {"id": "u1"}}

        assert extract_field(request, "org.id") is None
        assert extract_field(request, "user.org.id.deeper") is None

    def test_none_value_short_circuits(self):
        """Test that an explicit None is treated as absent."""
        assert extract_field({"user": None}, "user.id") is None

    def test_object_attributes(self):
        """Test that non-mapping objects are walked by attribute."""
        request = {"user": SimpleNamespace(id="u1", profile=SimpleNamespace(team="red"))}

        assert extract_field(request, "user.id") == "u1"
        assert extract_field(request, "user.profile.team") == "red"
        assert extract_field(request, "user.missing") is None

    def test_scalars_have_no_fields(self):
        """Test that indexing into a scalar yields None instead of a method."""
        assert extract_field({"name": "alice"}, "name.upper") is None

    def test_sequence_index(self):
        """Test numeric segments index into lists."""
        request = {"roles": ["admin", "viewer"]}

        assert extract_field(request, "roles.1") == "viewer"
        assert extract_field(request, "roles.5") is None


@dataclass
class Account:
    id: str
    org_id: str


class TestBuildContext:
    """Test cases for build_context."""

    def test_nested_and_flat_fields(self):
        """Test fields are written back at their dotted position."""
        request = {"org": {"id": "o1"}, "role": "admin"}

        context = build_context(request, "u1", ["org.id", "role"])

        assert context == {"userId": "u1", "org": {"id": "o1"}, "role": "admin"}

    def test_absent_field_contributes_nothing(self):
        """Test that a field missing from the request is skipped."""
        context = build_context({"role": "admin"}, "u1", ["missing.path"])

        assert context == {"userId": "u1"}

    def test_no_fields(self):
        """Test that only the subject is present without declared fields."""
        assert build_context({"role": "admin"}, "u1", None) == {"userId": "u1"}
        assert build_context({"role": "admin"}, "u1", ()) == {"userId": "u1"}

    def test_shared_prefix_is_merged(self):
        """Test intermediate objects are reused, not overwritten."""
        request = {"org": {"id": "o1", "plan": "pro"}}

        context = build_context(request, "u1", ["org.id", "org.plan"])

        assert context["org"] == {"id": "o1", "plan": "pro"}

    def test_collision_last_write_wins(self):
        """Test a later field replaces whatever sits at its position."""
        context = build_context({"userId": {"x": 1}}, "u1", ["userId.x"])
        assert context == {"userId": {"x": 1}}

        context = build_context({"userId": "spoofed"}, "u1", ["userId"])
        assert context == {"userId": "spoofed"}

        context = build_context({"a": {"b": "nested"}}, "u1", ["a.b", "a"])
        assert context == {"userId": "u1", "a": {"b": "nested"}}

    def test_request_is_not_mutated(self):
        """Test values are copied out of the request."""
        request = {"org": {"id": "o1"}}

        context = build_context(request, "u1", ["org", "org.id"])
        context["org"]["id"] = "changed"

        assert request == {"org": {"id": "o1"}}

    def test_object_values_are_json_compatible(self):
        """Test objects and datetimes are converted to plain JSON data."""
        request = {
            "account": Account(id="u1", org_id="o1"),
            "session": SimpleNamespace(started_at=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)),
        }

        context = build_context(request, "u1", ["account", "session.started_at"])

        assert context["account"] == {"id": "u1", "org_id": "o1"}
        assert context["session"] == {"started_at": "2024-05-01T12:30:00+00:00"}
        json.dumps(context)

    def test_idempotent(self):
        """Test identical inputs give byte-identical output."""
        request = {"org": {"id": "o1"}, "role": "admin", "team": {"name": "red"}}
        fields = ["team.name", "org.id", "role"]

        first = json.dumps(build_context(request, "u1", fields))
        second = json.dumps(build_context(request, "u1", fields))

        assert first == second


class TestResolveTenant:
    """Test cases for resolve_tenant."""

    def test_request_path(self):
        """Test a req.-prefixed tenant is read from the request."""
        assert resolve_tenant("req.org.id", {"org": {"id": "t9"}}) == "t9"

    def test_request_path_missing(self):
        """Test an unresolvable request path yields None."""
        assert resolve_tenant("req.org.id", {"tenant": "t5"}) is None

    def test_literal(self):
        """Test a plain value is used verbatim."""
        assert resolve_tenant("literal-tenant", {"tenant": "t5", "org": {"id": "t9"}}) == "literal-tenant"

    def test_request_default(self):
        """Test fallback to the request's tenant field."""
        assert resolve_tenant(None, {"tenant": "t5"}) == "t5"
        assert resolve_tenant("", {"tenant": "t5"}) == "t5"

    def test_nothing_available(self):
        """Test None when neither policy nor request names a tenant."""
        assert resolve_tenant(None, {}) is None
