import asyncio
import json
from typing import Any, Mapping, Optional, Union

import aiohttp
from loguru import logger
from pydantic import BaseModel

from infra_client.errors import InvalidResponseError, TransportError, error_for_status
from infra_client.models import ClientConfig

Body = Union[BaseModel, Mapping[str, Any], None]


def serialize_body(body: Body) -> Optional[dict]:
    """Turn a request body into a JSON-ready dict, dropping unset fields"""
    if body is None:
        return None
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", exclude_none=True)
    return dict(body)


class RequestExecutor:
    """Sends exactly one HTTP request per call and classifies the outcome.

    A 2xx answer returns the decoded JSON payload, or None for an empty body.
    Any other answer raises ClientError/NotFoundError/ServerError carrying the
    status and raw body, and failures below HTTP raise TransportError.
    Retrying is left to the caller.
    """

    def __init__(self, config: ClientConfig):
        self.config = config
        self.logger = logger
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.http_timeout),
                headers=self.config.auth_headers(),
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def execute(self, method: str, uri: str, body: Body = None) -> Any:
        url = f"{self.config.api_url}{uri}"
        payload = serialize_body(body)
        session = await self._ensure_session()
        self.logger.debug(f"{method} {uri}")

        try:
            async with session.request(method, url, json=payload) as response:
                raw = await response.read()
                request_uuid = response.headers.get("X-Request-Id")
                status = response.status
        except aiohttp.ClientError as e:
            self.logger.debug(f"{method} {uri} failed below HTTP: {e!r}")
            raise TransportError(method, uri, e) from e
        except asyncio.TimeoutError as e:
            raise TransportError(method, uri, e) from e

        text = raw.decode("utf-8", errors="replace")
        if status >= 400:
            self.logger.debug(f"HTTP {status} from {method} {uri}: {text[:500]}")
            raise error_for_status(status, text, request_uuid)

        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidResponseError(
                f"{method} {uri} returned a non-JSON body: {text[:200]}"
            ) from e
