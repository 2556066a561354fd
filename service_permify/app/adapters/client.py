"""
Permify client: one configured HTTP connection shared by every service.
"""

from typing import Dict, Optional

import httpx

from shared.config import BaseConfig
from shared.errors import ExternalServiceError
from shared.logging import get_logger

from .http import SERVICE_NAME
from .permission_service import PermissionService
from .schema_service import SchemaService
from .data_service import DataService
from .bundle_service import BundleService
from .tenancy_service import TenancyService
from .watch_service import WatchService


def build_http_client(base_url: str, api_key: Optional[str] = None,
                      timeout: float = 10.0,
                      transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create the ``httpx.AsyncClient`` used to reach Permify."""
    headers: Dict[str, str] = {"Accept": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"

    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        headers=headers,
        timeout=timeout,
        transport=transport,
    )


class PermifyClient:
    """Entry point to the Permify HTTP API.

    Usage::

        async with PermifyClient.from_settings(config) as permify:
            decision = await permify.permissions.check(...)
    """

    def __init__(self, http_client: httpx.AsyncClient, skip_health_check: bool = False,
                 health_check_timeout: float = 5.0):
        self.http = http_client
        self.skip_health_check = skip_health_check
        self.health_check_timeout = health_check_timeout
        self.logger = get_logger("permify.client")

        self.permissions = PermissionService(http_client)
        self.schemas = SchemaService(http_client)
        self.data = DataService(http_client)
        self.bundles = BundleService(http_client)
        self.tenancy = TenancyService(http_client)
        self.watch = WatchService(http_client)

    @classmethod
    def from_settings(cls, config: BaseConfig,
                      transport: Optional[httpx.AsyncBaseTransport] = None) -> "PermifyClient":
        http_client = build_http_client(
            config.base_url,
            api_key=config.api_key,
            timeout=config.request_timeout,
            transport=transport,
        )
        return cls(
            http_client,
            skip_health_check=config.skip_health_check,
            health_check_timeout=config.health_check_timeout,
        )

    async def health_check(self, timeout: Optional[float] = None) -> bool:
        """Return True when Permify answers ``/healthz`` with a 2xx."""
        try:
            response = await self.http.get(
                "/healthz",
                timeout=timeout if timeout is not None else self.health_check_timeout
            )
        except httpx.HTTPError as e:
            self.logger.warning("Permify health check failed", error=str(e))
            return False

        if not response.is_success:
            self.logger.warning("Permify health check failed", status_code=response.status_code)
            return False
        return True

    async def startup(self) -> None:
        """Verify Permify is reachable, unless the check is disabled."""
        if self.skip_health_check:
            self.logger.info("Permify health check skipped")
            return

        if not await self.health_check():
            raise ExternalServiceError(
                service=SERVICE_NAME,
                message="Permify is not reachable",
                details={"base_url": str(self.http.base_url)}
            )
        self.logger.info("Permify reachable", base_url=str(self.http.base_url))

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "PermifyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
