"""HTTP transport for the Portainer API.

Wraps ``httpx.AsyncClient`` so every service shares one base URL, auth header,
timeout policy and error-logging path. Non-2xx responses and network failures
are logged with diagnostics and raised as ``TransportError``.
"""

from typing import Any

import httpx
import structlog

from ..constants import API_KEY_HEADER, CONTENT_TYPE_JSON, HTTPS_MISMATCH_MARKER
from .exceptions import TransportError
from .settings import PortainerSettings


def build_async_client(
    settings: PortainerSettings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` bound to the Portainer instance."""
    headers = {
        API_KEY_HEADER: settings.api_key,
        "Content-Type": CONTENT_TYPE_JSON,
        "Accept": CONTENT_TYPE_JSON,
    }
    return httpx.AsyncClient(
        base_url=settings.url,
        headers=headers,
        timeout=httpx.Timeout(settings.http_timeout),
        verify=settings.verify_ssl,
        transport=transport,
    )


class PortainerTransport:
    """Authenticated request/response contract consumed by all services."""

    def __init__(
        self,
        settings: PortainerSettings,
        *,
        http_client: httpx.AsyncClient | None = None,
        logger: Any = None,
    ):
        settings.ensure_complete()
        self.settings = settings
        self._client = http_client or build_async_client(settings)
        self._owns_client = http_client is None
        self.logger = (logger or structlog.get_logger()).bind(component="transport")

    @property
    def base_url(self) -> str:
        return self.settings.url

    @property
    def is_configured(self) -> bool:
        """True once a base URL and API key are bound to the HTTP client."""
        return bool(self.settings.url and self.settings.api_key)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Issue a request and return the decoded body.

        Returns parsed JSON when the body is JSON, the raw text otherwise,
        and ``None`` for empty bodies.

        Raises:
            TransportError: On network failure or a non-2xx status.
        """
        if not self.is_configured:
            raise TransportError("Portainer transport is not configured", method=method, url=path)

        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            self._log_request_error(method, url, str(e) or type(e).__name__)
            self.logger.error(
                "No response received from Portainer. Check network connectivity, firewall "
                "rules, and that the Portainer instance is running at the configured URL.",
                url=url,
            )
            raise TransportError(
                f"{method} {path} failed: {e}", method=method, url=url
            ) from e

        if response.is_error:
            body = response.text
            self._log_request_error(
                method, url, f"Request failed with status {response.status_code}: {body[:500]}"
            )
            raise TransportError(
                f"{method} {path} returned {response.status_code}: {body[:200]}",
                method=method,
                url=url,
                status_code=response.status_code,
            )

        return self._decode(response)

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(
        self, path: str, json: Any = None, *, params: dict[str, Any] | None = None
    ) -> Any:
        return await self.request("POST", path, params=params, json=json)

    async def put(
        self, path: str, json: Any = None, *, params: dict[str, Any] | None = None
    ) -> Any:
        return await self.request("PUT", path, params=params, json=json)

    async def delete(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self.request("DELETE", path, params=params)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _log_request_error(self, method: str, url: str, message: str) -> None:
        self.logger.error("Portainer API error", error=message, request=f"{method} {url}")
        if HTTPS_MISMATCH_MARKER in message:
            self.logger.error(
                "Protocol mismatch: PORTAINER_URL probably uses http:// where the "
                "server expects https://",
                url=self.base_url,
            )

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
