"""handbridge: camera frames in, hand landmarks out.

Raw camera frames (YUV420 or packed RGBA/BGRA) are converted to a canonical
RGBA image, run through a MediaPipe hand landmark model, and returned as
normalized landmarks or a caller-visible error code.

Example:
    >>> from handbridge import BridgeEndpoint, InferenceSession, default_model_candidates
    >>> session = InferenceSession()
    >>> session.try_load(default_model_candidates())
    >>> endpoint = BridgeEndpoint(session)
    >>> response = endpoint.handle_detect_request(request)
"""

from handbridge.types import (
    PixelFormat,
    Plane,
    Frame,
    CanonicalImage,
    HandLandmarkIndex,
    Landmark,
    Hand,
    DetectionResult,
)
from handbridge.config import RunningMode, ModelConfig, BridgeConfig
from handbridge.errors import (
    HandbridgeError,
    ConversionError,
    InvalidPlaneCountError,
    ZeroDimensionError,
    BufferSizeError,
    LoadError,
    AllPathsFailedError,
    DetectionError,
    NotInitializedError,
    InvalidRequestError,
)
from handbridge.convert import convert
from handbridge.loader import ModelHandle, load
from handbridge.session import InferenceSession, SessionState, detect, close
from handbridge.bridge import BridgeEndpoint, ErrorCode, Response
from handbridge.paths import default_model_candidates, download_model

__version__ = "0.1.0"

__all__ = [
    # Types
    "PixelFormat",
    "Plane",
    "Frame",
    "CanonicalImage",
    "HandLandmarkIndex",
    "Landmark",
    "Hand",
    "DetectionResult",
    # Config
    "RunningMode",
    "ModelConfig",
    "BridgeConfig",
    # Errors
    "HandbridgeError",
    "ConversionError",
    "InvalidPlaneCountError",
    "ZeroDimensionError",
    "BufferSizeError",
    "LoadError",
    "AllPathsFailedError",
    "DetectionError",
    "NotInitializedError",
    "InvalidRequestError",
    # Pipeline
    "convert",
    "ModelHandle",
    "load",
    "InferenceSession",
    "SessionState",
    "detect",
    "close",
    "BridgeEndpoint",
    "ErrorCode",
    "Response",
    # Paths
    "default_model_candidates",
    "download_model",
]
