"""IPC module exposing the bridge endpoint to other processes.

- Interfaces: ABCs for swappable request/reply transports
- ZMQ RPC: ZeroMQ REQ-REP transport (requires pyzmq)
- Codec: JSON call/response encoding with base64 plane bytes
- Server/Client: bridge calls over a transport
- Utilities: ZMQ availability check, IPC address generation

Example:
    >>> from handbridge.ipc import BridgeServer, generate_ipc_address
    >>> address, _ = generate_ipc_address()
    >>> server = BridgeServer(endpoint)
    >>> server.bind(address)
    >>> server.serve_forever()
"""

from handbridge.ipc.interfaces import RPCServer, RPCClient
from handbridge.ipc.codec import encode_call, decode_call, encode_response, decode_response
from handbridge.ipc.server import BridgeServer, BridgeClient
from handbridge.ipc._util import check_zmq_available, generate_ipc_address

__all__ = [
    "RPCServer",
    "RPCClient",
    "encode_call",
    "decode_call",
    "encode_response",
    "decode_response",
    "BridgeServer",
    "BridgeClient",
    "check_zmq_available",
    "generate_ipc_address",
]
