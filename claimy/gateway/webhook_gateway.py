from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx

from claimy.claimy_error import ExternalGatewayError
from claimy.gateway.gateway import Gateway

_LOGGER = logging.getLogger(__name__)


@dataclass
class WebhookGateway(Gateway):
    """
    Gateway talking to an HTTP chat bridge.

    The bridge is expected to expose:
        GET  {url}/health    - liveness check used on connect
        PUT  {url}/display   - {"text": ...} replaces the shared channel description
        POST {url}/messages  - {"holder_id": ..., "text": ...} private message
        POST {url}/alerts    - {"holder_id": ..., "text": ...} poke

    Network failures mark the gateway as disconnected and fire the disconnect handler,
    so the scheduler's reconnect loop takes over.
    """

    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: float = 10.0
    transport: Optional[httpx.AsyncBaseTransport] = None

    _client: Optional[httpx.AsyncClient] = field(default=None, init=False)

    def __post_init__(self):
        parsed_url = urlparse(self.url)
        if not parsed_url.scheme or not parsed_url.netloc:
            raise ValueError(f"Invalid URL: {self.url}")
        self.url = self.url.rstrip("/")

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        client = httpx.AsyncClient(
            base_url=self.url,
            headers=self.headers,
            timeout=self.timeout,
            transport=self.transport,
        )
        try:
            response = await client.get("/health")
            response.raise_for_status()
        except httpx.HTTPError as e:
            await client.aclose()
            raise ExternalGatewayError(f"Could not connect to {self.url}: {e}") from e
        self._client = client
        _LOGGER.info(f"Connected to chat bridge at {self.url}")

    async def close(self) -> None:
        client = self._client
        self._client = None
        if client is not None:
            await client.aclose()

    async def render(self, text: str) -> None:
        await self._send("PUT", "/display", {"text": text})

    async def notify(self, holder_id: str, text: str) -> None:
        await self._send("POST", "/messages", {"holder_id": holder_id, "text": text})

    async def alert(self, holder_id: str, text: str) -> None:
        await self._send("POST", "/alerts", {"holder_id": holder_id, "text": text})

    async def _send(self, method: str, path: str, body: Dict[str, Any]) -> None:
        client = self._client
        if client is None:
            raise ExternalGatewayError("Not connected to the chat bridge")
        try:
            response = await client.request(method, path, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalGatewayError(
                f"Chat bridge rejected {method} {path}: {e.response.status_code}"
            ) from e
        except httpx.TransportError as e:
            _LOGGER.error(f"Lost connection to chat bridge: {e}")
            self._client = None
            await client.aclose()
            self.fire_disconnect()
            raise ExternalGatewayError(f"Lost connection to {self.url}: {e}") from e
