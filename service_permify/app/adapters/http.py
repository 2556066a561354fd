"""
Shared transport for the Permify services.

Every service talks to Permify through one ``httpx.AsyncClient`` owned by
``PermifyClient``. Failures are mapped onto ``ExternalServiceError`` here so
that callers only ever have to handle the shared error types.
"""

import json
from urllib.parse import quote
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from shared.errors import ExternalServiceError
from shared.logging import get_logger

SERVICE_NAME = "permify"


class PermifyHttpService:
    """Base class for thin Permify API wrappers."""

    logger_name = "permify.client"

    def __init__(self, http_client: httpx.AsyncClient):
        self.http = http_client
        self.logger = get_logger(self.logger_name)

    async def _request(self, method: str, path: str, *,
                       json_body: Optional[Dict[str, Any]] = None,
                       params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Issue one request and return the decoded JSON body."""
        try:
            response = await self.http.request(method, path, json=json_body, params=params)
        except httpx.HTTPError as e:
            self.logger.error("Permify HTTP error", method=method, path=path, error=str(e))
            raise ExternalServiceError(
                service=SERVICE_NAME,
                message="Permify unavailable",
                details={"http_error": str(e), "path": path}
            ) from e

        if not response.is_success:
            self.logger.error(
                "Permify request failed",
                method=method,
                path=path,
                status_code=response.status_code,
                response=response.text
            )
            raise ExternalServiceError(
                service=SERVICE_NAME,
                message=f"Unexpected status {response.status_code}",
                details={"status_code": response.status_code, "body": response.text, "path": path}
            )

        if not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            self.logger.error("Permify returned a malformed body", method=method, path=path, error=str(e))
            raise ExternalServiceError(
                service=SERVICE_NAME,
                message="Malformed response body",
                details={"path": path}
            ) from e

        self.logger.debug("Permify request completed", method=method, path=path)
        return data

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", path, json_body=payload)

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._request("GET", path, params=params)

    async def _delete(self, path: str) -> Dict[str, Any]:
        return await self._request("DELETE", path)

    async def _stream(self, path: str, payload: Dict[str, Any]) -> AsyncIterator[Dict[str, Any]]:
        """Yield each JSON object of a newline-delimited response stream.

        The read timeout is disabled; a watch stays open until Permify ends
        it or the consumer closes the iterator.
        """
        connect_timeout = self.http.timeout.connect or 10.0
        timeout = httpx.Timeout(connect_timeout, read=None)

        try:
            async with self.http.stream("POST", path, json=payload, timeout=timeout) as response:
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    self.logger.error(
                        "Permify stream rejected",
                        path=path,
                        status_code=response.status_code,
                        response=body
                    )
                    raise ExternalServiceError(
                        service=SERVICE_NAME,
                        message=f"Unexpected status {response.status_code}",
                        details={"status_code": response.status_code, "body": body, "path": path}
                    )

                self.logger.info("Permify stream opened", path=path)
                async for line in response.aiter_lines():
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        yield json.loads(line)
                    except ValueError as e:
                        self.logger.error("Undecodable stream message", path=path, error=str(e))
                        raise ExternalServiceError(
                            service=SERVICE_NAME,
                            message="Malformed stream message",
                            details={"path": path}
                        ) from e
        except httpx.HTTPError as e:
            self.logger.error("Permify stream error", path=path, error=str(e))
            raise ExternalServiceError(
                service=SERVICE_NAME,
                message="Permify unavailable",
                details={"http_error": str(e), "path": path}
            ) from e


def tenant_path(tenant_id: str, suffix: str) -> str:
    """Build ``/v1/tenants/{tenant_id}/{suffix}`` with the tenant id escaped."""
    return f"/v1/tenants/{path_segment(tenant_id)}/{suffix.lstrip('/')}"


def path_segment(value: str) -> str:
    """Escape a caller-supplied value for use as a single URL path segment."""
    return quote(str(value), safe="")
