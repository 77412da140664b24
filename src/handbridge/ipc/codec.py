"""Message codec for bridge calls over IPC.

Calls and responses are JSON. Plane bytes travel base64-encoded under the
same ``"bytes"`` key the in-process request uses.
"""

import base64
import binascii
import json
from typing import Any, Dict, Mapping, Tuple

from handbridge.bridge import Response


def encode_call(method: str, arguments: Mapping[str, Any]) -> bytes:
    """Encode a bridge call to JSON bytes.

    Args:
        method: Bridge method name, e.g. "detect".
        arguments: Request mapping; plane ``bytes`` values may be raw bytes.

    Returns:
        UTF-8 JSON message.
    """
    args = dict(arguments)
    if "planes" in args and args["planes"] is not None:
        args["planes"] = [_encode_plane(p) for p in args["planes"]]
    return json.dumps({"method": method, "arguments": args}).encode("utf-8")


def decode_call(data: bytes) -> Tuple[str, Dict[str, Any]]:
    """Decode a message produced by :func:`encode_call`.

    Returns:
        (method, arguments) with plane bytes restored.

    Raises:
        ValueError: If the message is not a valid call.
    """
    try:
        message = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to decode call: {e}") from e

    if not isinstance(message, dict) or not isinstance(message.get("method"), str):
        raise ValueError("Failed to decode call: missing method")

    args = message.get("arguments") or {}
    if not isinstance(args, dict):
        raise ValueError("Failed to decode call: arguments must be an object")

    planes = args.get("planes")
    if isinstance(planes, list):
        args["planes"] = [_decode_plane(p) for p in planes]
    return message["method"], args


def encode_response(response: Response) -> bytes:
    return json.dumps(response.to_dict()).encode("utf-8")


def decode_response(data: bytes) -> Response:
    """Decode a message produced by :func:`encode_response`.

    Raises:
        ValueError: If the message is not a valid response.
    """
    try:
        return Response.from_dict(json.loads(data))
    except (UnicodeDecodeError, json.JSONDecodeError, AttributeError, ValueError) as e:
        raise ValueError(f"Failed to decode response: {e}") from e


def _encode_plane(plane: Any) -> Any:
    if not isinstance(plane, Mapping):
        return plane
    out = dict(plane)
    raw = out.get("bytes")
    if isinstance(raw, (bytes, bytearray, memoryview)):
        out["bytes"] = base64.b64encode(bytes(raw)).decode("ascii")
    return out


def _decode_plane(plane: Any) -> Any:
    if not isinstance(plane, dict):
        return plane
    raw = plane.get("bytes")
    if isinstance(raw, str):
        try:
            plane["bytes"] = base64.b64decode(raw, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Failed to decode plane bytes: {e}") from e
    return plane


__all__ = ["encode_call", "decode_call", "encode_response", "decode_response"]
