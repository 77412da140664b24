"""Configuration classes for model loading and the bridge endpoint.

Example:
    >>> from handbridge.config import ModelConfig, RunningMode
    >>> config = ModelConfig(max_hands=1, running_mode=RunningMode.STREAM)
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict

from handbridge.types import PixelFormat


class RunningMode(Enum):
    """How the model is driven.

    IMAGE treats every frame independently. STREAM lets the model track hands
    across frames and requires increasing timestamps.
    """

    IMAGE = "image"
    STREAM = "stream"


_DELEGATES = ("cpu", "gpu")


@dataclass(frozen=True)
class ModelConfig:
    """Hand landmark model options.

    Attributes:
        max_hands: Maximum number of hands reported per frame.
        min_detection_confidence: Palm detection threshold [0, 1].
        min_presence_confidence: Hand presence threshold [0, 1].
        min_tracking_confidence: Tracking threshold [0, 1], stream mode only.
        running_mode: IMAGE or STREAM.
        delegate: Inference device, "cpu" or "gpu".
    """

    max_hands: int = 2
    min_detection_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    running_mode: RunningMode = RunningMode.IMAGE
    delegate: str = "cpu"

    def __post_init__(self) -> None:
        if self.max_hands < 1:
            raise ValueError(f"max_hands must be >= 1, got {self.max_hands}")
        for name in (
            "min_detection_confidence",
            "min_presence_confidence",
            "min_tracking_confidence",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0.0 and 1.0, got {value}")
        if not isinstance(self.running_mode, RunningMode):
            raise ValueError(f"running_mode must be a RunningMode, got {self.running_mode!r}")
        if self.delegate not in _DELEGATES:
            raise ValueError(f"delegate must be one of {_DELEGATES}, got {self.delegate!r}")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["running_mode"] = self.running_mode.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelConfig":
        data = dict(data)
        if "running_mode" in data and not isinstance(data["running_mode"], RunningMode):
            data["running_mode"] = RunningMode(data["running_mode"])
        return cls(**data)


@dataclass(frozen=True)
class BridgeConfig:
    """Bridge endpoint options.

    Attributes:
        strict_format: Reject unrecognized ``format`` values. When False,
            any unrecognized value is treated as ``default_format``.
        default_format: Packed format assumed when a request has no format.
    """

    strict_format: bool = True
    default_format: PixelFormat = PixelFormat.BGRA

    def __post_init__(self) -> None:
        if not self.default_format.is_packed:
            raise ValueError(
                f"default_format must be a packed format, got {self.default_format.value}"
            )


__all__ = ["RunningMode", "ModelConfig", "BridgeConfig"]
