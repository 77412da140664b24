"""Frame, image and landmark types shared across the pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np


class PixelFormat(Enum):
    """Raw camera buffer layouts accepted by the converter."""

    YUV420 = "yuv420"
    RGBA = "rgba"
    BGRA = "bgra"

    @property
    def is_packed(self) -> bool:
        return self is not PixelFormat.YUV420

    @property
    def min_planes(self) -> int:
        return 3 if self is PixelFormat.YUV420 else 1


@dataclass(frozen=True)
class Plane:
    """One plane of a raw frame.

    Attributes:
        data: Raw bytes of the plane.
        row_stride: Bytes per row, including any padding.
        pixel_stride: Bytes between horizontally adjacent samples.
            Only used for chroma planes; ``None`` means tightly packed.
    """

    data: bytes
    row_stride: Optional[int] = None
    pixel_stride: Optional[int] = None


@dataclass(frozen=True)
class Frame:
    """Raw camera frame as received from the caller.

    Attributes:
        width: Frame width in pixels.
        height: Frame height in pixels.
        format: Pixel layout of the planes.
        planes: Y, U, V planes for YUV420, or a single packed plane.
    """

    width: int
    height: int
    format: PixelFormat
    planes: Tuple[Plane, ...] = ()


@dataclass
class CanonicalImage:
    """Dense RGBA image handed to the inference backend.

    Attributes:
        data: uint8 array of shape (height, width, 4) in R, G, B, A order.
    """

    data: np.ndarray

    def __post_init__(self) -> None:
        if self.data.dtype != np.uint8 or self.data.ndim != 3 or self.data.shape[2] != 4:
            raise ValueError(
                f"CanonicalImage requires uint8 (H, W, 4) data, "
                f"got {self.data.dtype} {self.data.shape}"
            )

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def stride(self) -> int:
        return self.width * 4

    def tobytes(self) -> bytes:
        return np.ascontiguousarray(self.data).tobytes()

    def rgb(self) -> np.ndarray:
        """Return a contiguous (H, W, 3) RGB view without alpha."""
        return np.ascontiguousarray(self.data[:, :, :3])


class HandLandmarkIndex:
    """MediaPipe hand landmark indices.

    21 landmarks per hand as defined by MediaPipe Hands.

    Example:
        >>> wrist = hand.landmarks[HandLandmarkIndex.WRIST]
    """

    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_FINGER_MCP = 5
    INDEX_FINGER_PIP = 6
    INDEX_FINGER_DIP = 7
    INDEX_FINGER_TIP = 8
    MIDDLE_FINGER_MCP = 9
    MIDDLE_FINGER_PIP = 10
    MIDDLE_FINGER_DIP = 11
    MIDDLE_FINGER_TIP = 12
    RING_FINGER_MCP = 13
    RING_FINGER_PIP = 14
    RING_FINGER_DIP = 15
    RING_FINGER_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


NUM_HAND_LANDMARKS = 21


@dataclass(frozen=True)
class Landmark:
    """Normalized landmark. x, y in [0, 1] of the image; z is relative depth."""

    x: float
    y: float
    z: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": float(self.x), "y": float(self.y), "z": float(self.z)}


@dataclass
class Hand:
    """One detected hand.

    Attributes:
        landmarks: Landmarks in model order (wrist first).
        handedness: "Left" or "Right", empty if the backend did not report it.
        score: Handedness classification score [0, 1].
    """

    landmarks: List[Landmark]
    handedness: str = ""
    score: float = 0.0

    def to_array(self) -> np.ndarray:
        """Landmarks as a float32 array of shape (N, 3)."""
        return np.array([[lm.x, lm.y, lm.z] for lm in self.landmarks], dtype=np.float32)

    def to_list(self) -> List[Dict[str, float]]:
        return [lm.to_dict() for lm in self.landmarks]


@dataclass
class DetectionResult:
    """Hands found in one image, in the order the model produced them.

    An empty ``hands`` list means no hands were found; it is not an error.
    """

    hands: List[Hand] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.hands)

    @property
    def is_empty(self) -> bool:
        return not self.hands

    def to_list(self) -> List[List[Dict[str, float]]]:
        """Serialize as a list of hands, each a list of {x, y, z} records."""
        return [hand.to_list() for hand in self.hands]


__all__ = [
    "PixelFormat",
    "Plane",
    "Frame",
    "CanonicalImage",
    "HandLandmarkIndex",
    "NUM_HAND_LANDMARKS",
    "Landmark",
    "Hand",
    "DetectionResult",
]
