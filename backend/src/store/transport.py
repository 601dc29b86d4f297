"""Transport capability used by the orchestrator, plus an httpx implementation."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import httpx

from config import STORE_TIMEOUT
from models.errors import TransportError
from utils.logger import get_logger

logger = get_logger(__name__)

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[TransportError], None]


@dataclass
class StoreRequest:
    """A fully resolved store request."""
    action: str
    url: str
    method: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None  # query dict for GET, JSON-LD text, or form dict
    record_id: Optional[str] = None

    def __repr__(self) -> str:
        return f"StoreRequest(action={self.action}, method={self.method}, url={self.url})"


class Transport(ABC):
    """Sends a request and reports its outcome through exactly one callback."""

    @abstractmethod
    def send(self, request: StoreRequest, on_success: SuccessCallback, on_error: ErrorCallback) -> None:
        """
        Send a request.

        Args:
            request: Request to send
            on_success: Called with the decoded JSON body, or None for an empty body
            on_error: Called with a TransportError on network or HTTP failure
        """


class HttpxTransport(Transport):
    """Blocking transport on top of an httpx client; callbacks run before send() returns."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        base_url: str = "",
        timeout: float = STORE_TIMEOUT
    ):
        """
        Initialize the transport.

        Args:
            client: Preconfigured client (any httpx.Client, including a test client)
            base_url: Base URL used when no client is given
            timeout: Request timeout in seconds used when no client is given
        """
        self.client = client if client is not None else httpx.Client(base_url=base_url, timeout=timeout)

    def send(self, request: StoreRequest, on_success: SuccessCallback, on_error: ErrorCallback) -> None:
        kwargs: Dict[str, Any] = {"headers": request.headers}
        if request.body is not None:
            if request.method == "GET" and isinstance(request.body, dict):
                kwargs["params"] = request.body
            elif isinstance(request.body, (str, bytes)):
                kwargs["content"] = request.body
            else:
                kwargs["data"] = request.body

        logger.debug(f"Sending {request.method} {request.url} ({request.action})")
        try:
            response = self.client.request(request.method, request.url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Network error during {request.action} {request.url}: {e}")
            on_error(TransportError(0, request.action, str(e)))
            return

        if response.is_error:
            on_error(TransportError(response.status_code, request.action, response.text[:200]))
            return

        if not response.content:
            payload = None
        else:
            try:
                payload = response.json()
            except ValueError as e:
                logger.error(f"Invalid JSON in {request.action} response from {request.url}: {e}")
                on_error(TransportError(response.status_code, request.action, "invalid JSON body"))
                return

        on_success(payload)

    def close(self) -> None:
        self.client.close()
