"""
Transport interface.

A transport performs exactly one HTTP round trip for an ApiRequest. It does
not retry, throttle or interpret status codes; that is the dispatcher's job.
Network failures propagate as the underlying client's exceptions so the
error classifier can tell timeouts and connection errors apart.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..models.request import ApiRequest


@dataclass(frozen=True)
class RawResponse:
    """Undecoded HTTP response."""
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    content: bytes = b""

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


class Transport(ABC):
    """Abstract HTTP transport used by the Dispatcher."""

    @abstractmethod
    async def send(self, request: ApiRequest) -> RawResponse:
        """
        Perform one HTTP call.

        Args:
            request: The request descriptor

        Returns:
            RawResponse with status, headers and body bytes

        Raises:
            httpx.HTTPError (or the client library's equivalent) on
            network-level failures
        """
        pass

    @abstractmethod
    def set_access_token(self, access_token: str) -> None:
        """
        Use ``access_token`` for requests sent from now on.

        Requests already in flight finish with the token they started with.
        """
        pass

    async def aclose(self) -> None:
        """Release connections held by the transport."""
        return None
