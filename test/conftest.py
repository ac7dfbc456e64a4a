from typing import AsyncGenerator

import pytest_asyncio
from provider_server import ProviderServer

from infra_client.infra_client import InfraClient
from infra_client.models import ClientConfig


@pytest_asyncio.fixture
async def provider(unused_tcp_port_factory) -> AsyncGenerator[ProviderServer, None]:
    """Start and yield a ProviderServer on a random port."""
    server = ProviderServer()
    await server.start(port=unused_tcp_port_factory())
    try:
        yield server
    finally:
        await server.stop()


@pytest_asyncio.fixture
async def make_client(provider):
    """Build clients against the stub, synchronous mode unless overridden."""
    clients = []

    def factory(**overrides) -> InfraClient:
        options = dict(
            api_url=provider.url,
            user_uuid="uuid",
            api_token="token",
            sync=True,
            request_check_timeout=1.0,
            delay_interval=0.01,
            max_retries=2,
        )
        options.update(overrides)
        client = InfraClient(ClientConfig(**options))
        clients.append(client)
        return client

    yield factory
    for client in clients:
        await client.close()


@pytest_asyncio.fixture
async def client(make_client) -> InfraClient:
    return make_client()
