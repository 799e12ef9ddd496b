from dataclasses import dataclass, field
import logging
from typing import List, Optional, Tuple

from claimy.claimy_error import ExternalGatewayError
from claimy.gateway.gateway import Gateway

_LOGGER = logging.getLogger(__name__)


@dataclass
class MemoryGateway(Gateway):
    """In-process gateway recording everything sent to it. Used when no chat bridge is
    configured and in tests, which can also force failures and disconnects."""

    connected: bool = False
    fail_connect: bool = False
    fail_alerts: bool = False
    fail_notify: bool = False

    display: Optional[str] = None
    messages: List[Tuple[str, str]] = field(default_factory=list)
    alerts: List[Tuple[str, str]] = field(default_factory=list)
    connect_count: int = 0

    async def connect(self) -> None:
        if self.fail_connect:
            raise ExternalGatewayError("Connection refused")
        self.connected = True
        self.connect_count += 1

    async def close(self) -> None:
        self.connected = False

    async def render(self, text: str) -> None:
        self._check_connected()
        self.display = text

    async def notify(self, holder_id: str, text: str) -> None:
        self._check_connected()
        if self.fail_notify:
            raise ExternalGatewayError(f"Could not message {holder_id}")
        self.messages.append((holder_id, text))

    async def alert(self, holder_id: str, text: str) -> None:
        self._check_connected()
        if self.fail_alerts:
            raise ExternalGatewayError(f"Could not alert {holder_id}")
        self.alerts.append((holder_id, text))

    def disconnect(self) -> None:
        """Simulate the server dropping the connection"""
        _LOGGER.info("Simulating gateway disconnect")
        self.connected = False
        self.fire_disconnect()

    def _check_connected(self) -> None:
        if not self.connected:
            raise ExternalGatewayError("Gateway is not connected")
