"""Bridge server and client over a request/reply transport.

The server answers one call at a time, so calls on one socket reach the
model in the order they were sent.

Example:
    >>> server = BridgeServer(endpoint)
    >>> server.bind("tcp://*:5555")
    >>> server.serve_forever()

    >>> with BridgeClient() as client:
    ...     client.connect("tcp://localhost:5555")
    ...     response = client.detect(planes, width=640, height=480, format="yuv420")
"""

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional

from handbridge.bridge import BridgeEndpoint, ErrorCode, Response
from handbridge.ipc.codec import decode_call, decode_response, encode_call, encode_response
from handbridge.ipc._util import ZMQ_INSTALL_HINT, check_zmq_available
from handbridge.ipc.interfaces import RPCClient, RPCServer

logger = logging.getLogger(__name__)


def _require_zmq() -> None:
    if not check_zmq_available():
        raise ImportError(ZMQ_INSTALL_HINT)


class BridgeServer:
    """Serves bridge calls received on an RPC server.

    Args:
        endpoint: Endpoint that handles decoded calls.
        rpc_server: Transport. Defaults to a ZMQ REP socket.
    """

    def __init__(self, endpoint: BridgeEndpoint, rpc_server: Optional[RPCServer] = None):
        if rpc_server is None:
            _require_zmq()
            from handbridge.ipc.zmq_rpc import ZMQRPCServer

            rpc_server = ZMQRPCServer()
        self._endpoint = endpoint
        self._rpc = rpc_server
        self._stop_event = threading.Event()
        self._handled = 0

    @property
    def handled_count(self) -> int:
        return self._handled

    def bind(self, address: str) -> None:
        self._rpc.bind(address)

    def serve_once(self, timeout_ms: Optional[int] = None) -> bool:
        """Receive and answer one call.

        Returns:
            True if a call was answered, False on timeout.
        """
        data = self._rpc.recv(timeout_ms=timeout_ms)
        if data is None:
            return False

        try:
            method, arguments = decode_call(data)
        except ValueError as e:
            logger.warning(f"Malformed bridge call: {e}")
            response = Response.failure(ErrorCode.INVALID_ARGUMENTS, str(e))
        else:
            response = self._endpoint.handle(method, arguments)

        self._rpc.send(encode_response(response))
        self._handled += 1
        return True

    def serve_forever(self, poll_timeout_ms: int = 500) -> None:
        """Answer calls until :meth:`stop` is called."""
        self._stop_event.clear()
        logger.info("Bridge server running")
        while not self._stop_event.is_set():
            self.serve_once(timeout_ms=poll_timeout_ms)
        logger.info(f"Bridge server stopped after {self._handled} call(s)")

    def stop(self) -> None:
        self._stop_event.set()

    def close(self) -> None:
        self.stop()
        self._rpc.close()

    def __enter__(self) -> "BridgeServer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class BridgeClient:
    """Calls a remote bridge endpoint.

    Args:
        rpc_client: Transport. Defaults to a ZMQ REQ socket.
    """

    def __init__(self, rpc_client: Optional[RPCClient] = None):
        if rpc_client is None:
            _require_zmq()
            from handbridge.ipc.zmq_rpc import ZMQRPCClient

            rpc_client = ZMQRPCClient()
        self._rpc = rpc_client

    def connect(self, address: str) -> None:
        self._rpc.connect(address)

    def call(
        self,
        method: str,
        arguments: Mapping[str, Any],
        timeout_ms: Optional[int] = None,
    ) -> Response:
        """Send one call and wait for its response.

        Raises:
            TimeoutError: If no response arrives in time.
            ValueError: If the response cannot be decoded.
        """
        self._rpc.send(encode_call(method, arguments))
        data = self._rpc.recv(timeout_ms=timeout_ms)
        if data is None:
            raise TimeoutError(f"No response to {method!r} call")
        return decode_response(data)

    def detect(
        self,
        planes: List[Dict[str, Any]],
        width: int,
        height: int,
        format: Optional[str] = None,
        timestamp_ms: Optional[int] = None,
        timeout_ms: Optional[int] = None,
    ) -> Response:
        request: Dict[str, Any] = {"planes": planes, "width": width, "height": height}
        if format is not None:
            request["format"] = format
        if timestamp_ms is not None:
            request["timestampMs"] = timestamp_ms
        return self.call("detect", request, timeout_ms=timeout_ms)

    def close(self) -> None:
        self._rpc.close()

    def __enter__(self) -> "BridgeClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["BridgeServer", "BridgeClient"]
