import os
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_API_URL = "https://api.gridscale.io"
RESOURCE_ACTIVE_STATUS = "active"


class RequestStatus(str, Enum):
    pending = "pending"
    done = "done"
    failed = "failed"


class RequestStatusResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: str = RequestStatus.pending.value
    message: Optional[str] = None
    create_time: Optional[str] = None


class ClientConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_url: str = DEFAULT_API_URL
    user_uuid: str = ""
    api_token: str = ""
    sync: bool = True
    request_check_timeout: float = Field(default=120.0, gt=0)  # 2 minutes
    delay_interval: float = Field(default=1.0, gt=0)
    max_retries: int = Field(default=5, ge=0)
    http_timeout: float = Field(default=30.0, gt=0)
    user_agent: str = "infra-client-python"

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """Build a config from GRIDSCALE_UUID, GRIDSCALE_TOKEN and GRIDSCALE_URL"""
        values: dict = {
            "user_uuid": os.environ.get("GRIDSCALE_UUID", ""),
            "api_token": os.environ.get("GRIDSCALE_TOKEN", ""),
        }
        if os.environ.get("GRIDSCALE_URL"):
            values["api_url"] = os.environ["GRIDSCALE_URL"]
        values.update(overrides)
        return cls(**values)

    def auth_headers(self) -> dict:
        return {
            "X-Auth-UserId": self.user_uuid,
            "X-Auth-Token": self.api_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }


class CreateResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    object_uuid: Optional[str] = None
    request_uuid: Optional[str] = None


class ResourceProperties(BaseModel):
    """Snapshot of a provider object, unknown fields are kept as extras"""

    model_config = ConfigDict(extra="allow")

    object_uuid: str = ""
    name: str = ""
    status: str = ""
    labels: Optional[List[str]] = None
    location_uuid: Optional[str] = None
    create_time: Optional[str] = None
    change_time: Optional[str] = None


class ServerProperties(ResourceProperties):
    power: bool = False
    memory: Optional[int] = None
    cores: Optional[int] = None


class StorageProperties(ResourceProperties):
    capacity: Optional[int] = None
    storage_type: Optional[str] = None


class NetworkProperties(ResourceProperties):
    public_net: bool = False


class RelationProperties(BaseModel):
    model_config = ConfigDict(extra="allow")

    object_uuid: str = ""
    object_name: Optional[str] = None
    server_uuid: Optional[str] = None
    create_time: Optional[str] = None


class LabelProperties(BaseModel):
    model_config = ConfigDict(extra="allow")

    label: str
    create_time: Optional[str] = None


class AccessKeyProperties(BaseModel):
    model_config = ConfigDict(extra="allow")

    access_key: str = ""
    secret_key: Optional[str] = None
    user_uuid: Optional[str] = None

    @property
    def object_uuid(self) -> str:
        return self.access_key


class Record(BaseModel):
    """Events, metrics, buckets and other read-only listings"""

    model_config = ConfigDict(extra="allow")
