import pytest
from loguru import logger
from pydantic import ValidationError

from infra_client import disable_logging, enable_logging, poll_until
from infra_client.models import DEFAULT_API_URL, ClientConfig


def test_defaults():
    config = ClientConfig()

    assert config.api_url == DEFAULT_API_URL
    assert config.sync is True
    assert config.request_check_timeout == 120.0
    assert config.delay_interval == 1.0
    assert config.max_retries == 5


def test_trailing_slash_is_stripped():
    assert ClientConfig(api_url="http://localhost:8080/").api_url == "http://localhost:8080"


def test_config_is_read_only():
    config = ClientConfig()

    with pytest.raises(ValidationError):
        config.sync = False


@pytest.mark.parametrize(
    "field, value",
    [("request_check_timeout", 0), ("delay_interval", -1), ("max_retries", -1)],
)
def test_invalid_poll_settings_are_rejected(field, value):
    with pytest.raises(ValidationError):
        ClientConfig(**{field: value})


def test_from_env(monkeypatch):
    monkeypatch.setenv("GRIDSCALE_UUID", "user")
    monkeypatch.setenv("GRIDSCALE_TOKEN", "secret")
    monkeypatch.setenv("GRIDSCALE_URL", "http://api.local/")

    config = ClientConfig.from_env(sync=False)

    assert config.user_uuid == "user"
    assert config.api_token == "secret"
    assert config.api_url == "http://api.local"
    assert config.sync is False


def test_auth_headers():
    headers = ClientConfig(user_uuid="user", api_token="secret").auth_headers()

    assert headers["X-Auth-UserId"] == "user"
    assert headers["X-Auth-Token"] == "secret"


@pytest.mark.asyncio
async def test_logging_is_opt_in():
    messages = []
    sink_id = logger.add(messages.append, level="DEBUG", format="{message}", filter="infra_client")

    async def fetch():
        return "ready"

    try:
        await poll_until(fetch, lambda value: True, timeout=1.0, delay=0.01, description="quiet")
        handler_ids = enable_logging("DEBUG", console=False)
        await poll_until(fetch, lambda value: True, timeout=1.0, delay=0.01, description="loud")
        disable_logging(handler_ids)
    finally:
        logger.remove(sink_id)

    assert len(messages) == 1
    assert "loud" in messages[0]
