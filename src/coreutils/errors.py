"""Error kinds raised by the fetch layer and the endpoint clients."""

from typing import Optional


class PipelineError(Exception):
    """Base class for every error raised by the games pipeline"""


class NetworkError(PipelineError):
    """A request could not be completed"""


class TransportError(NetworkError):
    """All attempts failed at the transport level (connection, timeout)"""

    def __init__(self, url: str, attempts: int, cause: Optional[BaseException] = None):
        self.url = url
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Failed to fetch {url} after {attempts} attempts: {cause}")


class EndpointError(PipelineError):
    """An endpoint client could not produce its mapping for a batch"""

    def __init__(self, endpoint: str, status: Optional[int] = None, detail: str = ""):
        self.endpoint = endpoint
        self.status = status
        self.detail = detail
        message = f"{endpoint} {status if status is not None else 'transport'}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class RateLimitError(EndpointError):
    """HTTP 429 still returned after the last attempt"""


class ServerError(EndpointError):
    """HTTP 5xx still returned after the last attempt"""


class ClientError(EndpointError):
    """Any other non-2xx response"""


class ParseError(EndpointError):
    """Response body was not JSON or did not have the expected shape"""


def error_for_status(endpoint: str, status: int, detail: str = "") -> EndpointError:
    """Pick the EndpointError subclass matching a final HTTP status"""
    if status == 429:
        return RateLimitError(endpoint, status, detail)
    if 500 <= status < 600:
        return ServerError(endpoint, status, detail)
    return ClientError(endpoint, status, detail)
