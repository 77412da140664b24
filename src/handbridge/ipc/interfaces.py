"""Abstract request/reply transport interfaces.

The bridge server and client depend on these ABCs so the ZMQ transport can
be swapped for another request/reply channel.
"""

from abc import ABC, abstractmethod
from typing import Optional


class RPCServer(ABC):
    """Reply side of a synchronous request/reply channel."""

    @abstractmethod
    def bind(self, address: str) -> None:
        """Start listening on ``address``."""

    @abstractmethod
    def recv(self, timeout_ms: Optional[int] = None) -> Optional[bytes]:
        """Receive one request. Returns None on timeout."""

    @abstractmethod
    def send(self, data: bytes) -> None:
        """Send the reply to the last request."""

    @abstractmethod
    def close(self) -> None:
        """Release the channel."""

    @property
    @abstractmethod
    def is_bound(self) -> bool:
        ...

    def __enter__(self) -> "RPCServer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class RPCClient(ABC):
    """Request side of a synchronous request/reply channel."""

    @abstractmethod
    def connect(self, address: str) -> None:
        """Connect to a server at ``address``."""

    @abstractmethod
    def send(self, data: bytes) -> None:
        """Send one request."""

    @abstractmethod
    def recv(self, timeout_ms: Optional[int] = None) -> Optional[bytes]:
        """Receive the reply. Returns None on timeout."""

    @abstractmethod
    def close(self) -> None:
        """Release the channel."""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        ...

    def __enter__(self) -> "RPCClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["RPCServer", "RPCClient"]
