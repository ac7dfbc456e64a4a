from typing import Optional

import pytest
from aiohttp import web
from pydantic import BaseModel

from infra_client.errors import (
    ClientError,
    InvalidResponseError,
    NotFoundError,
    ServerError,
    TransportError,
)
from infra_client.infra_client import InfraClient
from infra_client.models import ClientConfig
from infra_client.request import RequestExecutor, serialize_body


class StorageCreate(BaseModel):
    name: str
    capacity: int
    storage_type: Optional[str] = None


@pytest.mark.asyncio
async def test_success_decodes_json(provider, client):
    provider.on("GET", "/objects/ping", (200, {"pong": True}))

    assert await client.executor.execute("GET", "/objects/ping") == {"pong": True}


@pytest.mark.asyncio
async def test_empty_body_decodes_to_none(provider, client):
    provider.on("DELETE", "/objects/thing", (204, None))

    assert await client.executor.execute("DELETE", "/objects/thing") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, error_type",
    [(400, ClientError), (404, NotFoundError), (409, ClientError), (500, ServerError), (503, ServerError)],
)
async def test_error_status_is_classified(provider, client, status, error_type):
    provider.on("GET", "/objects/thing", (status, "failure detail"))

    with pytest.raises(error_type) as exc_info:
        await client.executor.execute("GET", "/objects/thing")

    assert exc_info.value.status == status
    assert exc_info.value.body == "failure detail"


@pytest.mark.asyncio
async def test_request_id_header_is_kept_on_errors(provider, client):
    provider.on(
        "GET",
        "/objects/thing",
        lambda request: web.Response(status=400, text="bad", headers={"X-Request-Id": "req-1"}),
    )

    with pytest.raises(ClientError) as exc_info:
        await client.executor.execute("GET", "/objects/thing")

    assert exc_info.value.request_uuid == "req-1"


@pytest.mark.asyncio
async def test_non_json_success_body(provider, client):
    provider.on("GET", "/objects/thing", (200, "<html>"))

    with pytest.raises(InvalidResponseError):
        await client.executor.execute("GET", "/objects/thing")


@pytest.mark.asyncio
async def test_auth_headers_and_body_are_sent(provider, client):
    provider.on("POST", "/objects/storages", (200, {"object_uuid": "x"}))

    await client.executor.execute(
        "POST", "/objects/storages", StorageCreate(name="data", capacity=10)
    )

    headers = provider.headers[-1]
    assert headers["X-Auth-UserId"] == "uuid"
    assert headers["X-Auth-Token"] == "token"
    assert provider.bodies[("POST", "/objects/storages")] == [{"name": "data", "capacity": 10}]


def test_serialize_body():
    assert serialize_body(None) is None
    assert serialize_body({"power": False}) == {"power": False}
    assert serialize_body(StorageCreate(name="a", capacity=1)) == {"name": "a", "capacity": 1}


@pytest.mark.asyncio
async def test_connection_refused_is_a_transport_error(unused_tcp_port_factory):
    config = ClientConfig(api_url=f"http://127.0.0.1:{unused_tcp_port_factory()}")
    executor = RequestExecutor(config)
    try:
        with pytest.raises(TransportError):
            await executor.execute("GET", "/objects/servers")
    finally:
        await executor.close()


class FlakyExecutor:
    def __init__(self, failures: int, error=None):
        self.failures = failures
        self.error = error
        self.calls = 0

    async def execute(self, method, uri, body=None):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error or TransportError(method, uri, ConnectionResetError())
        return {"ok": True}

    async def close(self):
        pass


@pytest.mark.asyncio
async def test_client_retries_transport_errors():
    executor = FlakyExecutor(failures=2)
    client = InfraClient(ClientConfig(max_retries=2, delay_interval=0.01), executor=executor)

    assert await client.request("GET", "/objects/servers") == {"ok": True}
    assert executor.calls == 3


@pytest.mark.asyncio
async def test_client_gives_up_after_max_retries():
    executor = FlakyExecutor(failures=10)
    client = InfraClient(ClientConfig(max_retries=2, delay_interval=0.01), executor=executor)

    with pytest.raises(TransportError):
        await client.request("GET", "/objects/servers")
    assert executor.calls == 3


@pytest.mark.asyncio
async def test_client_does_not_retry_http_errors():
    executor = FlakyExecutor(failures=1, error=ServerError(500, "boom"))
    client = InfraClient(ClientConfig(max_retries=2, delay_interval=0.01), executor=executor)

    with pytest.raises(ServerError):
        await client.request("GET", "/objects/servers")
    assert executor.calls == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["POST", "PATCH", "DELETE"])
async def test_client_sends_mutations_once(method):
    executor = FlakyExecutor(failures=1)
    client = InfraClient(ClientConfig(max_retries=2, delay_interval=0.01), executor=executor)

    with pytest.raises(TransportError):
        await client.request(method, "/objects/storages")
    assert executor.calls == 1
