"""ZMQ REQ-REP based RPC transport.

Each instance owns its own zmq.Context, so a server and a client can live in
the same process (tests) or in different ones (bridge deployment).

Example:
    Server side:
        >>> server = ZMQRPCServer()
        >>> server.bind("tcp://*:5555")
        >>> data = server.recv()
        >>> server.send(b'{"ok": true, "result": []}')
        >>> server.close()

    Client side:
        >>> client = ZMQRPCClient()
        >>> client.connect("tcp://localhost:5555")
        >>> client.send(b'{"method": "detect", "arguments": {...}}')
        >>> response = client.recv()
        >>> client.close()
"""

import logging
from typing import Optional

import zmq

from handbridge.ipc.interfaces import RPCClient, RPCServer

logger = logging.getLogger(__name__)


class _ZMQSocketOwner:
    """Context/socket lifecycle shared by the REP and REQ sides."""

    def __init__(self, linger_ms: int):
        self._linger_ms = linger_ms
        self._context: Optional[zmq.Context] = None
        self._socket: Optional[zmq.Socket] = None

    def _open(self, socket_type: int) -> zmq.Socket:
        self._context = zmq.Context()
        self._socket = self._context.socket(socket_type)
        self._socket.setsockopt(zmq.LINGER, self._linger_ms)
        return self._socket

    def _recv(self, timeout_ms: Optional[int]) -> Optional[bytes]:
        if timeout_ms is not None:
            old_timeout = self._socket.getsockopt(zmq.RCVTIMEO)
            self._socket.setsockopt(zmq.RCVTIMEO, timeout_ms)
        try:
            return self._socket.recv()
        except zmq.Again:
            return None
        finally:
            if timeout_ms is not None:
                self._socket.setsockopt(zmq.RCVTIMEO, old_timeout)

    def _shutdown(self) -> None:
        if self._socket is not None:
            try:
                self._socket.close(linger=self._linger_ms)
            except zmq.ZMQError as e:
                logger.debug(f"Socket close failed: {e}")
            self._socket = None

        if self._context is not None:
            try:
                self._context.term()
            except zmq.ZMQError as e:
                logger.debug(f"Context term failed: {e}")
            self._context = None


class ZMQRPCServer(_ZMQSocketOwner, RPCServer):
    """ZMQ REP socket RPC server.

    Args:
        linger_ms: Socket linger time on close (milliseconds).
    """

    def __init__(self, linger_ms: int = 0):
        super().__init__(linger_ms)
        self._is_bound = False

    def bind(self, address: str) -> None:
        """Bind the REP socket to an address. Binding twice is a no-op."""
        if self._is_bound:
            return
        self._open(zmq.REP).bind(address)
        self._is_bound = True
        logger.info(f"RPC server bound to {address}")

    def recv(self, timeout_ms: Optional[int] = None) -> Optional[bytes]:
        """Receive a request, or None on timeout or when not bound."""
        if not self._is_bound or self._socket is None:
            return None
        return self._recv(timeout_ms)

    def send(self, data: bytes) -> None:
        if self._socket is None:
            raise RuntimeError("Server not bound")
        self._socket.send(data)

    def close(self) -> None:
        self._shutdown()
        self._is_bound = False

    @property
    def is_bound(self) -> bool:
        return self._is_bound


class ZMQRPCClient(_ZMQSocketOwner, RPCClient):
    """ZMQ REQ socket RPC client.

    Args:
        send_timeout_ms: Default send timeout (milliseconds).
        recv_timeout_ms: Default receive timeout (milliseconds).
        linger_ms: Socket linger time on close (milliseconds).
    """

    def __init__(
        self,
        send_timeout_ms: int = 30000,
        recv_timeout_ms: int = 30000,
        linger_ms: int = 0,
    ):
        super().__init__(linger_ms)
        self._send_timeout_ms = send_timeout_ms
        self._recv_timeout_ms = recv_timeout_ms
        self._is_connected = False

    def connect(self, address: str) -> None:
        """Connect the REQ socket. Connecting twice is a no-op."""
        if self._is_connected:
            return
        socket = self._open(zmq.REQ)
        socket.setsockopt(zmq.SNDTIMEO, self._send_timeout_ms)
        socket.setsockopt(zmq.RCVTIMEO, self._recv_timeout_ms)
        socket.connect(address)
        self._is_connected = True
        logger.debug(f"RPC client connected to {address}")

    def send(self, data: bytes) -> None:
        if self._socket is None:
            raise RuntimeError("Client not connected")
        self._socket.send(data)

    def recv(self, timeout_ms: Optional[int] = None) -> Optional[bytes]:
        """Receive the reply, or None on timeout or when not connected."""
        if not self._is_connected or self._socket is None:
            return None
        return self._recv(timeout_ms)

    def close(self) -> None:
        self._shutdown()
        self._is_connected = False

    @property
    def is_connected(self) -> bool:
        return self._is_connected


__all__ = ["ZMQRPCServer", "ZMQRPCClient"]
