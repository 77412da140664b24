"""Bridge endpoint: frame request in, landmarks or an error code out.

The endpoint is the only place where internal exceptions are mapped to
caller-visible codes. Nothing raised below it crosses the boundary.

Request shape::

    {
        "planes": [{"bytes": b"...", "bytesPerRow": 2560, "bytesPerPixel": 4}],
        "width": 640,
        "height": 480,
        "format": "yuv420" | "rgba" | "bgra",   # optional
        "timestampMs": 1234,                    # optional, stream mode
    }
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
import logging

from handbridge.config import BridgeConfig
from handbridge.convert import convert
from handbridge.errors import ConversionError, InvalidRequestError, NotInitializedError
from handbridge.session import InferenceSession
from handbridge.types import Frame, PixelFormat, Plane

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    INIT_ERROR = "INIT_ERROR"
    DETECTION_ERROR = "DETECTION_ERROR"
    INVALID_ARGUMENTS = "INVALID_ARGUMENTS"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"


@dataclass(frozen=True)
class Response:
    """Result of one bridge call.

    Attributes:
        ok: True on success.
        result: Hands as a list of lists of {x, y, z} on success.
        code: Error code on failure.
        message: Diagnostic message on failure.
    """

    ok: bool
    result: Optional[List[List[Dict[str, float]]]] = None
    code: Optional[ErrorCode] = None
    message: str = ""

    @classmethod
    def success(cls, result: List[List[Dict[str, float]]]) -> "Response":
        return cls(ok=True, result=result)

    @classmethod
    def failure(cls, code: ErrorCode, message: str) -> "Response":
        return cls(ok=False, code=code, message=message)

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True, "result": self.result}
        return {"ok": False, "error": {"code": self.code.value, "message": self.message}}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Response":
        if data.get("ok"):
            return cls.success(data.get("result") or [])
        error = data.get("error") or {}
        return cls.failure(ErrorCode(error.get("code")), error.get("message", ""))


class BridgeEndpoint:
    """Validates frame requests and runs them through convert + detect.

    Args:
        session: Inference session that owns the model.
        config: Endpoint options.

    Example:
        >>> endpoint = BridgeEndpoint(session)
        >>> response = endpoint.handle_detect_request(request)
        >>> if response.ok:
        ...     print(f"{len(response.result)} hand(s)")
    """

    def __init__(self, session: InferenceSession, config: Optional[BridgeConfig] = None):
        self._session = session
        self._config = config or BridgeConfig()

    @property
    def session(self) -> InferenceSession:
        return self._session

    def handle(self, method: str, arguments: Optional[Mapping[str, Any]]) -> Response:
        """Dispatch a method call by name."""
        if method == "detect":
            return self.handle_detect_request(arguments or {})
        logger.debug(f"Unknown bridge method: {method!r}")
        return Response.failure(ErrorCode.NOT_IMPLEMENTED, f"Method not implemented: {method}")

    def handle_detect_request(self, request: Mapping[str, Any]) -> Response:
        try:
            frame = self.parse_request(request)
            timestamp_ms = _as_int(request.get("timestampMs"), "timestampMs", default=None)
        except InvalidRequestError as e:
            logger.debug(f"Rejected detect request: {e}")
            return Response.failure(ErrorCode.INVALID_ARGUMENTS, str(e))

        try:
            image = convert(frame)
            result = self._session.detect(image, timestamp_ms)
        except NotInitializedError as e:
            return Response.failure(ErrorCode.INIT_ERROR, str(e))
        except ConversionError as e:
            logger.debug(f"Frame conversion failed: {e}")
            return Response.failure(ErrorCode.DETECTION_ERROR, str(e))
        except Exception as e:
            logger.exception("Detection failed")
            return Response.failure(ErrorCode.DETECTION_ERROR, str(e) or type(e).__name__)

        logger.debug(f"Detected {len(result.hands)} hand(s) in {frame.width}x{frame.height} frame")
        return Response.success(result.to_list())

    def parse_request(self, request: Mapping[str, Any]) -> Frame:
        """Build a Frame from a raw request mapping.

        Raises:
            InvalidRequestError: If the request violates the caller contract.
        """
        if not isinstance(request, Mapping):
            raise InvalidRequestError("Request must be a mapping")

        planes = request.get("planes")
        width = _as_int(request.get("width"), "width")
        height = _as_int(request.get("height"), "height")

        if not planes or width <= 0 or height <= 0:
            raise InvalidRequestError("Missing bytes, width, or height")
        if not isinstance(planes, (list, tuple)):
            raise InvalidRequestError("planes must be a list")

        fmt = self._resolve_format(request.get("format"))
        parsed = tuple(_parse_plane(i, p) for i, p in enumerate(planes))
        return Frame(width=width, height=height, format=fmt, planes=parsed)

    def _resolve_format(self, value: Any) -> PixelFormat:
        if value is None:
            return self._config.default_format
        try:
            return PixelFormat(str(value).lower())
        except ValueError:
            if self._config.strict_format:
                raise InvalidRequestError(f"Unsupported pixel format: {value!r}") from None
            logger.warning(
                f"Unrecognized pixel format {value!r}, "
                f"treating as {self._config.default_format.value}"
            )
            return self._config.default_format


def _as_int(value: Any, name: str, default: Optional[int] = 0) -> Optional[int]:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRequestError(f"{name} must be an integer, got {type(value).__name__}")
    return value


def _parse_plane(index: int, plane: Any) -> Plane:
    if not isinstance(plane, Mapping):
        raise InvalidRequestError(f"Plane {index} must be a mapping")

    data = plane.get("bytes")
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidRequestError(f"Plane {index} is missing bytes")

    row_stride = plane.get("bytesPerRow")
    pixel_stride = plane.get("bytesPerPixel")
    for name, value in (("bytesPerRow", row_stride), ("bytesPerPixel", pixel_stride)):
        if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value <= 0):
            raise InvalidRequestError(f"Plane {index} {name} must be a positive integer")

    return Plane(data=bytes(data), row_stride=row_stride, pixel_stride=pixel_stride)


__all__ = ["ErrorCode", "Response", "BridgeEndpoint"]
