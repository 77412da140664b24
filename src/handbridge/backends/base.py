"""Backend protocol definitions for hand landmark inference."""

from pathlib import Path
from typing import Callable, Optional, Protocol

from handbridge.config import ModelConfig
from handbridge.types import CanonicalImage, DetectionResult


class LandmarkerBackend(Protocol):
    """Protocol for hand landmark inference backends.

    A backend wraps one loaded model. It is not required to be thread-safe;
    callers serialize access through :class:`handbridge.loader.ModelHandle`.
    Examples: MediaPipe HandLandmarker.
    """

    def detect(
        self, image: CanonicalImage, timestamp_ms: Optional[int] = None
    ) -> DetectionResult:
        """Run one forward pass and return hands in model order."""
        ...

    def close(self) -> None:
        """Release the model and its native resources."""
        ...


BackendFactory = Callable[[Path, ModelConfig], LandmarkerBackend]
"""Creates a backend from a model file; raises on any failure."""


__all__ = ["LandmarkerBackend", "BackendFactory"]
