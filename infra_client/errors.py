from typing import Optional


class InfraClientError(Exception):
    """Base class for every error raised by the client"""


class InvalidArgumentError(InfraClientError, ValueError):
    """An argument failed a local check, no request was sent"""


class TransportError(InfraClientError):
    """The request never produced an HTTP response"""

    def __init__(self, method: str, uri: str, cause: BaseException):
        super().__init__(f"{method} {uri} failed: {cause!r}")
        self.method = method
        self.uri = uri
        self.cause = cause


class HttpError(InfraClientError):
    def __init__(self, status: int, body: str, request_uuid: Optional[str] = None):
        super().__init__(f"HTTP {status}: {body}")
        self.status = status
        self.body = body
        self.request_uuid = request_uuid


class ClientError(HttpError):
    """4xx response"""


class NotFoundError(ClientError):
    pass


class ServerError(HttpError):
    """5xx response"""


class InvalidResponseError(InfraClientError):
    """A successful response carried a body that cannot be decoded"""


class JobFailedError(InfraClientError):
    def __init__(self, request_uuid: str, message: Optional[str] = None):
        super().__init__(f"Request {request_uuid} failed: {message or 'no details'}")
        self.request_uuid = request_uuid
        self.message = message


class PollTimeoutError(InfraClientError, TimeoutError):
    def __init__(self, description: str, timeout: float):
        super().__init__(f"Timed out after {timeout}s waiting for {description}")
        self.description = description
        self.timeout = timeout


class OperationCancelledError(InfraClientError):
    def __init__(self, description: str):
        super().__init__(f"Cancelled while waiting for {description}")
        self.description = description


def error_for_status(
    status: int, body: str, request_uuid: Optional[str] = None
) -> HttpError:
    """Classify a non-success HTTP status"""
    if status == 404:
        return NotFoundError(status, body, request_uuid)
    if status >= 500:
        return ServerError(status, body, request_uuid)
    return ClientError(status, body, request_uuid)


def is_transient(error: Exception) -> bool:
    """Errors that a wait loop retries until its deadline"""
    return isinstance(error, (TransportError, ServerError))


def never(error: Exception) -> bool:
    return False
