import asyncio
from typing import Any, List, Optional

from loguru import logger
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from infra_client import kinds
from infra_client.errors import TransportError
from infra_client.jobs import wait_for_request_completed
from infra_client.models import ClientConfig, Record, RequestStatusResponse
from infra_client.request import Body, RequestExecutor
from infra_client.resources import (
    LabelAPI,
    NetworkAPI,
    RelationAPI,
    ResourceAPI,
    SnapshotAPI,
    unwrap_list,
)
from infra_client.servers import ServerAPI
from infra_client.validation import require_uuid

RETRIED_METHODS = frozenset({"GET"})


class InfraClient:
    """Client for the provider's REST API.

    With ``config.sync`` enabled every mutating call returns only once the
    provider job has finished and the resource reached its target state.

    Example:
        async with InfraClient(ClientConfig.from_env()) as client:
            created = await client.storages.create({"name": "data", "capacity": 10})
            storage = await client.storages.get(created.object_uuid)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        executor: Optional[RequestExecutor] = None,
    ):
        self.config = config or ClientConfig()
        self.logger = logger
        self.executor = executor or RequestExecutor(self.config)

        self.servers = ServerAPI(self, kinds.SERVERS)
        self.storages = ResourceAPI(self, kinds.STORAGES)
        self.networks = NetworkAPI(self, kinds.NETWORKS)
        self.ips = ResourceAPI(self, kinds.IPS)
        self.firewalls = ResourceAPI(self, kinds.FIREWALLS)
        self.templates = ResourceAPI(self, kinds.TEMPLATES)
        self.isoimages = ResourceAPI(self, kinds.ISO_IMAGES)
        self.sshkeys = ResourceAPI(self, kinds.SSH_KEYS)
        self.paas_services = ResourceAPI(self, kinds.PAAS_SERVICES)
        self.paas_security_zones = ResourceAPI(self, kinds.PAAS_SECURITY_ZONES)
        self.object_storage_access_keys = ResourceAPI(
            self, kinds.OBJECT_STORAGE_ACCESS_KEYS
        )
        self.labels = LabelAPI(self)

        self.server_ips = RelationAPI(self, kinds.SERVER_IPS)
        self.server_isoimages = RelationAPI(self, kinds.SERVER_ISO_IMAGES)
        self.server_networks = RelationAPI(self, kinds.SERVER_NETWORKS)
        self.server_storages = RelationAPI(self, kinds.SERVER_STORAGES)

    async def __aenter__(self) -> "InfraClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.executor.close()

    def _log_retry(self, retry_state) -> None:
        self.logger.warning(
            f"Transport error on attempt {retry_state.attempt_number}/"
            f"{self.config.max_retries + 1}: {retry_state.outcome.exception()}. "
            f"Retrying in {self.config.delay_interval:.2f}s"
        )

    async def request(self, method: str, uri: str, body: Body = None) -> Any:
        """Send one API request.

        Transport failures of GET requests are retried up to
        ``config.max_retries`` times. Mutations are sent exactly once.
        """
        attempts = self.config.max_retries + 1 if method in RETRIED_METHODS else 1
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(TransportError),
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(self.config.delay_interval),
            before_sleep=self._log_retry,
            reraise=True,
        ):
            with attempt:
                return await self.executor.execute(method, uri, body)

    async def wait_for_request(
        self, request_uuid: str, *, cancel: Optional[asyncio.Event] = None
    ) -> RequestStatusResponse:
        return await wait_for_request_completed(
            self.request,
            request_uuid,
            timeout=self.config.request_check_timeout,
            delay=self.config.delay_interval,
            cancel=cancel,
        )

    def snapshots(self, storage_id: str) -> SnapshotAPI:
        """Snapshots belonging to one storage"""
        require_uuid(storage_id=storage_id)
        return SnapshotAPI(self, kinds.snapshot_kind(storage_id))

    async def _list(self, listing: kinds.ListingKind) -> List[Record]:
        payload = await self.request("GET", listing.path)
        return unwrap_list(payload, listing.list_key, Record)

    async def list_paas_templates(self) -> List[Record]:
        return await self._list(kinds.PAAS_TEMPLATES)

    async def list_object_storage_buckets(self) -> List[Record]:
        return await self._list(kinds.OBJECT_STORAGE_BUCKETS)
