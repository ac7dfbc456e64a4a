import asyncio
from typing import Any, Awaitable, Callable, Optional

from infra_client.errors import InvalidResponseError, JobFailedError
from infra_client.models import RequestStatus, RequestStatusResponse
from infra_client.polling import poll_until
from infra_client.validation import require_present

REQUEST_BASE = "/requests"

Send = Callable[..., Awaitable[Any]]


async def fetch_request_status(send: Send, request_uuid: str) -> RequestStatusResponse:
    """Look up the status of a provider job"""
    payload = await send("GET", f"{REQUEST_BASE}/{request_uuid}")
    if not isinstance(payload, dict):
        raise InvalidResponseError(f"Expected the status of request {request_uuid}")
    return RequestStatusResponse.model_validate(payload.get(request_uuid) or {})


async def wait_for_request_completed(
    send: Send,
    request_uuid: str,
    *,
    timeout: float,
    delay: float,
    cancel: Optional[asyncio.Event] = None,
) -> RequestStatusResponse:
    """Block until the job finishes.

    Transport errors and 5xx answers while polling are retried until the
    deadline; a 4xx answer or a failed job ends the wait with an error.
    """
    require_present(request_uuid=request_uuid)

    def finished(response: RequestStatusResponse) -> bool:
        if response.status == RequestStatus.failed.value:
            raise JobFailedError(request_uuid, response.message)
        return response.status == RequestStatus.done.value

    return await poll_until(
        lambda: fetch_request_status(send, request_uuid),
        finished,
        timeout=timeout,
        delay=delay,
        cancel=cancel,
        description=f"request {request_uuid}",
    )
