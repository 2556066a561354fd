"""
Permify access service.

Hosts the Permify client and the permission gate inside a FastAPI
application. Applications mount their own routers on ``service.app`` and
protect them with ``service.gate.guard()``.
"""

from typing import Dict, Optional

from fastapi import FastAPI

from shared.base_service import BaseService
from shared.errors import ExternalServiceError

from .adapters import PermifyClient
from .adapters.http import SERVICE_NAME
from .domain import PermissionGate, PolicyRegistry


class PermifyAccessService(BaseService):
    """Permify access service implementation."""

    def __init__(self, client: Optional[PermifyClient] = None,
                 registry: Optional[PolicyRegistry] = None, **config_overrides):
        super().__init__("permify", 8020, **config_overrides)

        self.client = client or PermifyClient.from_settings(self.config)
        self.registry = registry if registry is not None else PolicyRegistry()
        self.gate = PermissionGate(self.client.permissions, self.registry, metrics=self.metrics)

        self.app.state.permify = self.client
        self.app.state.policies = self.registry
        self.app.state.permission_gate = self.gate

        self._setup_permify_routes()

    def _setup_permify_routes(self):
        """Set up Permify-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "permify",
                "message": "Permify Access Layer",
                "version": "1.0.0",
                "permify_url": str(self.client.http.base_url),
                "policies": len(self.registry),
            }

    async def _on_startup(self) -> None:
        await self.client.startup()

    async def _on_shutdown(self) -> None:
        await self.client.aclose()
        self.logger.info("Permify client closed")

    async def _check_dependencies(self) -> Dict[str, str]:
        if not await self.client.health_check():
            raise ExternalServiceError(service=SERVICE_NAME, message="Permify is not reachable")
        return {"permify": "ok"}


def create_app(client: Optional[PermifyClient] = None,
               registry: Optional[PolicyRegistry] = None, **config_overrides) -> FastAPI:
    """Create the FastAPI application."""
    return PermifyAccessService(client=client, registry=registry, **config_overrides).app


if __name__ == "__main__":
    PermifyAccessService().run()
