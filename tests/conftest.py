from __future__ import annotations

from typing import Any, Dict, Optional

import pytest
import pytest_asyncio

from fake_service import FakeHubService, connection_string
from signalr import Client
from signalr.config import DEFAULT_CONFIG


@pytest.fixture
def hub_service() -> FakeHubService:
    return FakeHubService()


@pytest_asyncio.fixture
async def service_url(aiohttp_server, hub_service: FakeHubService) -> str:
    server = await aiohttp_server(hub_service.app())
    return str(server.make_url("")).rstrip("/")


@pytest.fixture
def make_client(service_url: str):
    def _make(hub: str = "Chat", config: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Client:
        merged = {**DEFAULT_CONFIG, **(config or {})}
        return Client(connection_string(service_url), hub, config=merged, **kwargs)

    return _make
