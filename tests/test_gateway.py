"""Tests for the gateway implementations"""

import asyncio
import json

import httpx
import pytest

from claimy.claimy_error import ExternalGatewayError
from claimy.gateway.webhook_gateway import WebhookGateway
from claimy.mem.memory_gateway import MemoryGateway


class TestMemoryGateway:
    """Test cases for MemoryGateway"""

    @pytest.mark.asyncio
    async def test_records_output(self):
        gateway = MemoryGateway()
        await gateway.connect()
        await gateway.render("state")
        await gateway.notify("h1", "hello")
        await gateway.alert("h2", "poke")

        assert gateway.display == "state"
        assert gateway.messages == [("h1", "hello")]
        assert gateway.alerts == [("h2", "poke")]
        await gateway.close()
        assert not gateway.connected

    @pytest.mark.asyncio
    async def test_not_connected(self):
        gateway = MemoryGateway()
        with pytest.raises(ExternalGatewayError):
            await gateway.render("state")

    @pytest.mark.asyncio
    async def test_disconnect_calls_handler(self):
        gateway = MemoryGateway()
        calls = []

        async def on_disconnect():
            calls.append(True)

        gateway.set_disconnect_handler(on_disconnect)
        await gateway.connect()
        gateway.disconnect()
        await asyncio.sleep(0)

        assert calls == [True]
        assert not gateway.connected


class TestWebhookGateway:
    """Test cases for WebhookGateway"""

    def create_gateway(self, handler) -> WebhookGateway:
        return WebhookGateway(
            url="http://bridge.test/", transport=httpx.MockTransport(handler)
        )

    def test_invalid_url(self):
        with pytest.raises(ValueError):
            WebhookGateway(url="not a url")

    @pytest.mark.asyncio
    async def test_requests(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content) if request.content else None
            requests.append((request.method, request.url.path, body))
            return httpx.Response(200, json={})

        gateway = self.create_gateway(handler)
        await gateway.connect()
        assert gateway.connected
        await gateway.render("state")
        await gateway.notify("h1", "hello")
        await gateway.alert("h2", "poke")
        await gateway.close()

        assert requests == [
            ("GET", "/health", None),
            ("PUT", "/display", {"text": "state"}),
            ("POST", "/messages", {"holder_id": "h1", "text": "hello"}),
            ("POST", "/alerts", {"holder_id": "h2", "text": "poke"}),
        ]
        assert not gateway.connected

    @pytest.mark.asyncio
    async def test_connect_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        gateway = self.create_gateway(handler)
        with pytest.raises(ExternalGatewayError):
            await gateway.connect()
        assert not gateway.connected

    @pytest.mark.asyncio
    async def test_rejected_request_keeps_connection(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/alerts":
                return httpx.Response(404)
            return httpx.Response(200)

        gateway = self.create_gateway(handler)
        await gateway.connect()
        with pytest.raises(ExternalGatewayError):
            await gateway.alert("h1", "poke")
        assert gateway.connected
        await gateway.close()

    @pytest.mark.asyncio
    async def test_transport_error_fires_disconnect(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/health":
                return httpx.Response(200)
            raise httpx.ConnectError("connection reset", request=request)

        async def on_disconnect():
            calls.append(True)

        gateway = self.create_gateway(handler)
        gateway.set_disconnect_handler(on_disconnect)
        await gateway.connect()
        with pytest.raises(ExternalGatewayError):
            await gateway.render("state")
        await asyncio.sleep(0)

        assert not gateway.connected
        assert calls == [True]
