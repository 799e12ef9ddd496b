from abc import ABC, abstractmethod
import asyncio
import logging
from typing import Awaitable, Callable, Optional

_LOGGER = logging.getLogger(__name__)

DisconnectHandler = Callable[[], Awaitable[None]]


class Gateway(ABC):
    """Connection to the external chat / display server.

    Every method may raise ExternalGatewayError. Implementations report a lost connection
    by calling fire_disconnect(), which schedules the registered handler.
    """

    disconnect_handler: Optional[DisconnectHandler] = None

    @abstractmethod
    async def connect(self) -> None:
        """Open a session with the server"""

    @abstractmethod
    async def close(self) -> None:
        """Close the session. Safe to call on a session that is already closed."""

    @abstractmethod
    async def render(self, text: str) -> None:
        """Replace the contents of the shared display surface"""

    @abstractmethod
    async def notify(self, holder_id: str, text: str) -> None:
        """Send a private message to a holder"""

    @abstractmethod
    async def alert(self, holder_id: str, text: str) -> None:
        """Send an attention grabbing alert (A poke) to a holder"""

    def set_disconnect_handler(self, handler: Optional[DisconnectHandler]) -> None:
        self.disconnect_handler = handler

    def fire_disconnect(self) -> None:
        handler = self.disconnect_handler
        if handler is None:
            _LOGGER.warning("gateway_disconnected_without_handler")
            return
        asyncio.create_task(handler())


def get_default_gateway(config) -> Gateway:
    """Get the gateway for the config given.

    The implementation can be overridden by setting the CLAIMY_GATEWAY environment variable
    to a fully qualified class name. Otherwise a WebhookGateway is used when a webhook url
    is configured, and a MemoryGateway when it is not.
    """
    from claimy.constants import CLAIMY_GATEWAY
    from claimy.util import get_impl

    if config.webhook_url:
        from claimy.gateway.webhook_gateway import WebhookGateway

        gateway_class = get_impl(CLAIMY_GATEWAY, Gateway, WebhookGateway)
        if gateway_class is WebhookGateway:
            return WebhookGateway(url=config.webhook_url)
        return gateway_class()

    from claimy.mem.memory_gateway import MemoryGateway

    gateway_class = get_impl(CLAIMY_GATEWAY, Gateway, MemoryGateway)
    _LOGGER.info(f"Using Gateway: {gateway_class.__name__}")
    return gateway_class()
