"""Declarative description of every resource type the provider exposes."""

from dataclasses import dataclass
from typing import Optional

from infra_client.models import (
    AccessKeyProperties,
    NetworkProperties,
    RelationProperties,
    ResourceProperties,
    ServerProperties,
    StorageProperties,
)


@dataclass(frozen=True)
class ResourceKind:
    name: str
    path: str
    item_key: str
    list_key: str
    model: type = ResourceProperties
    deleted_segment: Optional[str] = None
    location_segment: Optional[str] = None
    metrics_key: Optional[str] = None
    uuid_ids: bool = True
    poll_after_create: bool = True


@dataclass(frozen=True)
class RelationKind:
    name: str
    segment: str
    item_key: str
    list_key: str
    model: type = RelationProperties


@dataclass(frozen=True)
class ListingKind:
    """Read-only collections without single-object endpoints"""

    path: str
    list_key: str


SERVERS = ResourceKind(
    name="server",
    path="/objects/servers",
    item_key="server",
    list_key="servers",
    model=ServerProperties,
    deleted_segment="servers",
    location_segment="servers",
    metrics_key="server_metrics",
)

STORAGES = ResourceKind(
    name="storage",
    path="/objects/storages",
    item_key="storage",
    list_key="storages",
    model=StorageProperties,
    deleted_segment="storages",
    location_segment="storages",
)

NETWORKS = ResourceKind(
    name="network",
    path="/objects/networks",
    item_key="network",
    list_key="networks",
    model=NetworkProperties,
    deleted_segment="networks",
    location_segment="networks",
)

IPS = ResourceKind(
    name="IP address",
    path="/objects/ips",
    item_key="ip",
    list_key="ips",
    deleted_segment="ips",
    location_segment="ips",
)

FIREWALLS = ResourceKind(
    name="firewall",
    path="/objects/firewalls",
    item_key="firewall",
    list_key="firewalls",
)

TEMPLATES = ResourceKind(
    name="template",
    path="/objects/templates",
    item_key="template",
    list_key="templates",
    deleted_segment="templates",
    location_segment="templates",
)

ISO_IMAGES = ResourceKind(
    name="ISO image",
    path="/objects/isoimages",
    item_key="isoimage",
    list_key="isoimages",
    deleted_segment="isoimages",
    location_segment="isoimages",
)

SSH_KEYS = ResourceKind(
    name="SSH key",
    path="/objects/sshkeys",
    item_key="sshkey",
    list_key="sshkeys",
)

PAAS_SERVICES = ResourceKind(
    name="PaaS service",
    path="/objects/paas/services",
    item_key="paas_service",
    list_key="paas_services",
    deleted_segment="paas_services",
    metrics_key="paas_service_metrics",
)

PAAS_SECURITY_ZONES = ResourceKind(
    name="PaaS security zone",
    path="/objects/paas/security_zones",
    item_key="paas_security_zone",
    list_key="paas_security_zones",
)

OBJECT_STORAGE_ACCESS_KEYS = ResourceKind(
    name="object storage access key",
    path="/objects/objectstorages/access_keys",
    item_key="access_key",
    list_key="access_keys",
    model=AccessKeyProperties,
    uuid_ids=False,
    poll_after_create=False,
)

PAAS_TEMPLATES = ListingKind(
    path="/objects/paas/service_templates", list_key="paas_service_templates"
)

OBJECT_STORAGE_BUCKETS = ListingKind(
    path="/objects/objectstorages/buckets", list_key="buckets"
)


def snapshot_kind(storage_id: str) -> ResourceKind:
    return ResourceKind(
        name="snapshot",
        path=f"/objects/storages/{storage_id}/snapshots",
        item_key="snapshot",
        list_key="snapshots",
        deleted_segment="snapshots",
        location_segment="snapshots",
    )


SERVER_IPS = RelationKind(
    name="IP address", segment="ips", item_key="ip_relation", list_key="ip_relations"
)

SERVER_ISO_IMAGES = RelationKind(
    name="ISO image",
    segment="isoimages",
    item_key="isoimage_relation",
    list_key="isoimage_relations",
)

SERVER_NETWORKS = RelationKind(
    name="network",
    segment="networks",
    item_key="network_relation",
    list_key="network_relations",
)

SERVER_STORAGES = RelationKind(
    name="storage",
    segment="storages",
    item_key="storage_relation",
    list_key="storage_relations",
)
