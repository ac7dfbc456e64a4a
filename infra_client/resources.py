"""Resource APIs generated from the declarative kinds in ``infra_client.kinds``.

Every mutating call follows the same shape: check identifiers locally,
send the request and, when the client runs in synchronous mode, wait for
the provider job and then for the resource to converge.
"""

import asyncio
from typing import TYPE_CHECKING, Any, List, Optional

from infra_client.errors import InvalidArgumentError, InvalidResponseError, NotFoundError
from infra_client.kinds import RelationKind, ResourceKind
from infra_client.models import CreateResponse, LabelProperties, Record
from infra_client.polling import poll_until, wait_for_active, wait_for_deleted, wait_for_exists
from infra_client.request import Body
from infra_client.validation import require_present, require_uuid

if TYPE_CHECKING:
    from infra_client.infra_client import InfraClient


def unwrap(payload: Any, key: str, model):
    """Decode a single-object envelope such as {"server": {...}}"""
    if not isinstance(payload, dict) or not isinstance(payload.get(key), dict):
        raise InvalidResponseError(f"Expected an object under '{key}'")
    return model.model_validate(payload[key])


def unwrap_list(payload: Any, key: str, model) -> list:
    """Decode a list envelope, either keyed by UUID or a plain array"""
    if payload is None:
        return []
    if not isinstance(payload, dict):
        raise InvalidResponseError(f"Expected an object holding '{key}'")
    items = payload.get(key) or []
    if isinstance(items, dict):
        items = items.values()
    return [model.model_validate(item) for item in items]


class _Synchronized:
    def __init__(self, client: "InfraClient"):
        self.client = client
        self.logger = client.logger

    @property
    def sync(self) -> bool:
        return self.client.config.sync

    def _poll_options(self, cancel: Optional[asyncio.Event]) -> dict:
        return {
            "timeout": self.client.config.request_check_timeout,
            "delay": self.client.config.delay_interval,
            "cancel": cancel,
        }

    async def _wait_for_job(self, payload: Any, cancel: Optional[asyncio.Event]) -> None:
        request_uuid = payload.get("request_uuid") if isinstance(payload, dict) else None
        if request_uuid:
            await self.client.wait_for_request(request_uuid, cancel=cancel)


class ResourceAPI(_Synchronized):
    def __init__(self, client: "InfraClient", kind: ResourceKind):
        super().__init__(client)
        self.kind = kind

    def _check_id(self, **identifiers: str) -> None:
        if self.kind.uuid_ids:
            require_uuid(**identifiers)
        else:
            require_present(**identifiers)

    def _uri(self, object_id: str, *segments: str) -> str:
        return "/".join((self.kind.path, object_id) + segments)

    def _describe(self, object_id: str) -> str:
        return f"{self.kind.name} {object_id}"

    async def get(self, object_id: str):
        self._check_id(id=object_id)
        payload = await self.client.request("GET", self._uri(object_id))
        return unwrap(payload, self.kind.item_key, self.kind.model)

    async def list(self) -> List:
        payload = await self.client.request("GET", self.kind.path)
        return unwrap_list(payload, self.kind.list_key, self.kind.model)

    async def get_by_name(self, name: str):
        require_present(name=name)
        for item in await self.list():
            if item.name == name:
                return item
        raise NotFoundError(404, f"{self.kind.name} '{name}' not found")

    async def create(
        self, body: Body = None, *, cancel: Optional[asyncio.Event] = None
    ) -> CreateResponse:
        payload = await self.client.request("POST", self.kind.path, body)
        response = CreateResponse.model_validate(payload or {})
        if self.sync:
            await self._wait_for_job(payload, cancel)
            if response.object_uuid and self.kind.poll_after_create:
                await self.wait_for_active(response.object_uuid, cancel=cancel)
        return response

    async def update(
        self, object_id: str, body: Body, *, cancel: Optional[asyncio.Event] = None
    ) -> None:
        self._check_id(id=object_id)
        payload = await self.client.request("PATCH", self._uri(object_id), body)
        if self.sync:
            await self._wait_for_job(payload, cancel)
            await self.wait_for_active(object_id, cancel=cancel)

    async def delete(
        self, object_id: str, *, cancel: Optional[asyncio.Event] = None
    ) -> None:
        self._check_id(id=object_id)
        payload = await self.client.request("DELETE", self._uri(object_id))
        if self.sync:
            await self._wait_for_job(payload, cancel)
            await self.wait_for_deleted(object_id, cancel=cancel)

    async def wait_for_active(
        self, object_id: str, *, cancel: Optional[asyncio.Event] = None
    ):
        self._check_id(id=object_id)
        return await wait_for_active(
            lambda: self.get(object_id),
            description=self._describe(object_id),
            **self._poll_options(cancel),
        )

    async def wait_for_deleted(
        self, object_id: str, *, cancel: Optional[asyncio.Event] = None
    ) -> None:
        self._check_id(id=object_id)
        await wait_for_deleted(
            lambda: self.get(object_id),
            description=self._describe(object_id),
            **self._poll_options(cancel),
        )

    async def list_events(self, object_id: str) -> List[Record]:
        self._check_id(id=object_id)
        payload = await self.client.request("GET", self._uri(object_id, "events"))
        return unwrap_list(payload, "events", Record)

    async def list_metrics(self, object_id: str) -> List[Record]:
        if not self.kind.metrics_key:
            raise InvalidArgumentError(f"{self.kind.name} has no metrics")
        self._check_id(id=object_id)
        payload = await self.client.request("GET", self._uri(object_id, "metrics"))
        return unwrap_list(payload, self.kind.metrics_key, Record)

    async def list_by_location(self, location_id: str) -> List:
        if not self.kind.location_segment:
            raise InvalidArgumentError(f"{self.kind.name} cannot be listed by location")
        require_uuid(location_id=location_id)
        uri = f"/objects/locations/{location_id}/{self.kind.location_segment}"
        payload = await self.client.request("GET", uri)
        return unwrap_list(payload, self.kind.list_key, self.kind.model)

    async def list_deleted(self) -> List:
        if not self.kind.deleted_segment:
            raise InvalidArgumentError(f"Deleted {self.kind.name} objects are not listed")
        payload = await self.client.request(
            "GET", f"/objects/deleted/{self.kind.deleted_segment}"
        )
        return unwrap_list(
            payload, f"deleted_{self.kind.deleted_segment}", self.kind.model
        )


class NetworkAPI(ResourceAPI):
    async def get_public(self):
        for network in await self.list():
            if network.public_net:
                return network
        raise NotFoundError(404, "public network not found")


class SnapshotAPI(ResourceAPI):
    """Snapshots of one storage"""

    async def rollback(
        self,
        snapshot_id: str,
        body: Body = None,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> None:
        await self._snapshot_action(snapshot_id, "rollback", body or {"rollback": True}, cancel)

    async def export_to_s3(
        self, snapshot_id: str, body: Body, *, cancel: Optional[asyncio.Event] = None
    ) -> None:
        await self._snapshot_action(snapshot_id, "export_to_s3", body, cancel)

    async def _snapshot_action(
        self, snapshot_id: str, action: str, body: Body, cancel: Optional[asyncio.Event]
    ) -> None:
        self._check_id(snapshot_id=snapshot_id)
        payload = await self.client.request("PATCH", self._uri(snapshot_id, action), body)
        if self.sync:
            await self._wait_for_job(payload, cancel)
            await self.wait_for_active(snapshot_id, cancel=cancel)


class RelationAPI(_Synchronized):
    """Objects linked to a server, e.g. IP addresses or ISO images"""

    def __init__(self, client: "InfraClient", kind: RelationKind):
        super().__init__(client)
        self.kind = kind

    def _uri(self, server_id: str, object_id: Optional[str] = None) -> str:
        uri = f"/objects/servers/{server_id}/{self.kind.segment}"
        return f"{uri}/{object_id}" if object_id else uri

    def _describe(self, server_id: str, object_id: str) -> str:
        return f"{self.kind.name} {object_id} on server {server_id}"

    async def list(self, server_id: str) -> List:
        require_uuid(server_id=server_id)
        payload = await self.client.request("GET", self._uri(server_id))
        return unwrap_list(payload, self.kind.list_key, self.kind.model)

    async def get(self, server_id: str, object_id: str):
        require_uuid(server_id=server_id, object_id=object_id)
        payload = await self.client.request("GET", self._uri(server_id, object_id))
        return unwrap(payload, self.kind.item_key, self.kind.model)

    async def update(
        self,
        server_id: str,
        object_id: str,
        body: Body,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> None:
        require_uuid(server_id=server_id, object_id=object_id)
        payload = await self.client.request("PATCH", self._uri(server_id, object_id), body)
        if self.sync:
            await self._wait_for_job(payload, cancel)

    async def link(
        self,
        server_id: str,
        object_id: str,
        *,
        cancel: Optional[asyncio.Event] = None,
        **options: Any,
    ) -> None:
        """Attach an object to a server, extra options go into the request body"""
        require_uuid(server_id=server_id, object_id=object_id)
        body = {"object_uuid": object_id, **options}
        payload = await self.client.request("POST", self._uri(server_id), body)
        if self.sync:
            await self._wait_for_job(payload, cancel)
            await wait_for_exists(
                lambda: self.get(server_id, object_id),
                description=self._describe(server_id, object_id),
                **self._poll_options(cancel),
            )

    async def unlink(
        self, server_id: str, object_id: str, *, cancel: Optional[asyncio.Event] = None
    ) -> None:
        require_uuid(server_id=server_id, object_id=object_id)
        payload = await self.client.request("DELETE", self._uri(server_id, object_id))
        if self.sync:
            await self._wait_for_job(payload, cancel)
            await wait_for_deleted(
                lambda: self.get(server_id, object_id),
                description=self._describe(server_id, object_id),
                **self._poll_options(cancel),
            )


class LabelAPI(_Synchronized):
    path = "/objects/labels"

    async def list(self) -> List[LabelProperties]:
        payload = await self.client.request("GET", self.path)
        return unwrap_list(payload, "labels", LabelProperties)

    async def create(
        self, label: str, *, cancel: Optional[asyncio.Event] = None
    ) -> CreateResponse:
        require_present(label=label)
        payload = await self.client.request("POST", self.path, {"label": label})
        if self.sync:
            await self._wait_for_job(payload, cancel)
        return CreateResponse.model_validate(payload or {})

    async def delete(self, label: str, *, cancel: Optional[asyncio.Event] = None) -> None:
        require_present(label=label)
        payload = await self.client.request("DELETE", f"{self.path}/{label}")
        if self.sync:
            await self._wait_for_job(payload, cancel)
            # labels have no single-object endpoint, watch the listing instead
            await poll_until(
                self.list,
                lambda labels: all(item.label != label for item in labels),
                description=f"label {label} to be deleted",
                **self._poll_options(cancel),
            )
