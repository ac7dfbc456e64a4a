import asyncio
from typing import Optional

from infra_client.errors import JobFailedError, PollTimeoutError, ServerError
from infra_client.polling import poll_until
from infra_client.resources import ResourceAPI


class ServerAPI(ResourceAPI):
    """Servers, including power management"""

    async def is_on(self, server_id: str) -> bool:
        server = await self.get(server_id)
        return server.power

    async def wait_for_power(
        self, server_id: str, on: bool, *, cancel: Optional[asyncio.Event] = None
    ):
        self._check_id(id=server_id)
        return await poll_until(
            lambda: self.get(server_id),
            lambda server: server.power == on,
            description=f"server {server_id} to power {'on' if on else 'off'}",
            **self._poll_options(cancel),
        )

    async def set_power_state(
        self, server_id: str, on: bool, *, cancel: Optional[asyncio.Event] = None
    ) -> None:
        if await self.is_on(server_id) == on:
            self.logger.debug(f"Server {server_id} already powered {'on' if on else 'off'}")
            return
        payload = await self.client.request(
            "PATCH", self._uri(server_id, "power"), {"power": on}
        )
        if self.sync:
            await self._wait_for_job(payload, cancel)
            await self.wait_for_power(server_id, on, cancel=cancel)

    async def start(self, server_id: str, *, cancel: Optional[asyncio.Event] = None) -> None:
        await self.set_power_state(server_id, True, cancel=cancel)

    async def stop(self, server_id: str, *, cancel: Optional[asyncio.Event] = None) -> None:
        """Hard power-off"""
        await self.set_power_state(server_id, False, cancel=cancel)

    async def shutdown(
        self, server_id: str, *, cancel: Optional[asyncio.Event] = None
    ) -> None:
        """Ask the guest OS to shut down, powering off if that does not work.

        A 5xx answer to the shutdown request, or a shutdown that does not
        complete in time, falls back to stop().
        """
        if not await self.is_on(server_id):
            return
        try:
            payload = await self.client.request(
                "PATCH", self._uri(server_id, "shutdown"), {}
            )
        except ServerError as e:
            self.logger.warning(
                f"Graceful shutdown of server {server_id} failed ({e}), powering off"
            )
            await self.stop(server_id, cancel=cancel)
            return

        if not self.sync:
            return
        try:
            await self._wait_for_job(payload, cancel)
            await self.wait_for_power(server_id, False, cancel=cancel)
        except (PollTimeoutError, JobFailedError) as e:
            self.logger.warning(
                f"Graceful shutdown of server {server_id} did not finish ({e}), powering off"
            )
            await self.stop(server_id, cancel=cancel)
