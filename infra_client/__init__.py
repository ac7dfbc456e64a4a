from loguru import logger

from infra_client.errors import (
    ClientError,
    HttpError,
    InfraClientError,
    InvalidArgumentError,
    InvalidResponseError,
    JobFailedError,
    NotFoundError,
    OperationCancelledError,
    PollTimeoutError,
    ServerError,
    TransportError,
)
from infra_client.infra_client import InfraClient
from infra_client.log import disable_logging, enable_logging
from infra_client.models import ClientConfig, CreateResponse, RequestStatus
from infra_client.polling import poll_until

logger.disable("infra_client")

__all__ = [
    "ClientConfig",
    "ClientError",
    "CreateResponse",
    "HttpError",
    "InfraClient",
    "InfraClientError",
    "InvalidArgumentError",
    "InvalidResponseError",
    "JobFailedError",
    "NotFoundError",
    "OperationCancelledError",
    "PollTimeoutError",
    "RequestStatus",
    "ServerError",
    "TransportError",
    "disable_logging",
    "enable_logging",
    "poll_until",
]
