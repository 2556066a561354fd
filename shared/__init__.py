"""
Shared utilities for the Permify access layer.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI application scaffolding

Do not import from service_* packages into shared/.
"""
