import inspect
from collections import Counter, defaultdict
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from aiohttp import web
from loguru import logger

Reply = Union[Tuple[int, Any], Callable[[web.Request], Any]]


class ProviderServer:
    """Scriptable stand-in for the provider API.

    Replies are registered per (method, path). Several replies are served in
    order and the last one repeats. Unregistered paths answer 404.
    """

    def __init__(self, host: str = "127.0.0.1"):
        self.host = host
        self.port = None
        self.runner = None
        self.routes: Dict[Tuple[str, str], List[Reply]] = {}
        self.hits: Counter = Counter()
        self.calls: List[Tuple[str, str]] = []
        self.bodies: Dict[Tuple[str, str], List[Any]] = defaultdict(list)
        self.headers: List[Any] = []
        self.app = web.Application()
        self.app.router.add_route("*", "/{tail:.*}", self.handle)
        self.logger = logger

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def on(self, method: str, path: str, *replies: Reply) -> None:
        self.routes[(method, path)] = list(replies)

    def job(self, request_uuid: str, *statuses: str, message: Optional[str] = None) -> None:
        """Serve the status of a provider request, one status per poll"""
        self.on(
            "GET",
            f"/requests/{request_uuid}",
            *[
                (200, {request_uuid: {"status": status, "message": message}})
                for status in statuses
            ],
        )

    def count(self, method: str, path: str) -> int:
        return self.hits[(method, path)]

    async def handle(self, request: web.Request) -> web.StreamResponse:
        key = (request.method, request.path)
        self.hits[key] += 1
        self.calls.append(key)
        self.headers.append(request.headers.copy())
        if request.can_read_body:
            self.bodies[key].append(await request.json())

        replies = self.routes.get(key)
        if not replies:
            self.logger.info(f"No reply scripted for {request.method} {request.path}")
            return web.json_response({"message": "not found"}, status=404)

        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        if callable(reply):
            result = reply(request)
            return await result if inspect.isawaitable(result) else result

        status, payload = reply
        if payload is None:
            return web.Response(status=status)
        if isinstance(payload, str):
            return web.Response(status=status, text=payload)
        return web.json_response(payload, status=status)

    async def start(self, port: int = 8080):
        self.port = port
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.host, port)
        await site.start()
        self.logger.info(f"Provider stub started on port {port}")
        return site

    async def stop(self) -> None:
        if self.runner is not None:
            await self.runner.cleanup()
            self.runner = None
