"""Exception hierarchy for the frame-to-landmark pipeline.

Components raise these typed exceptions. Only the bridge endpoint turns
them into caller-visible error codes.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


class HandbridgeError(Exception):
    """Base class for all handbridge errors."""


# ── Conversion ───────────────────────────────────────────────────────

class ConversionError(HandbridgeError):
    """Raised when a raw frame cannot be converted to a canonical image."""


class InvalidPlaneCountError(ConversionError):
    """Frame carries fewer planes than its pixel format requires."""

    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"Expected at least {expected} plane(s), got {got}")


class ZeroDimensionError(ConversionError):
    """Frame width or height is not positive."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        super().__init__(f"Frame dimensions must be positive, got {width}x{height}")


class BufferSizeError(ConversionError):
    """Plane buffer is too short for the declared geometry."""


# ── Loading ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LoadAttempt:
    """One failed candidate during model loading."""

    path: Path
    message: str


class LoadError(HandbridgeError):
    """Raised when a model cannot be loaded."""


class AllPathsFailedError(LoadError):
    """Every candidate model location failed to load.

    Attributes:
        attempts: Failed candidates in the order they were tried.
    """

    def __init__(self, attempts: List[LoadAttempt]):
        self.attempts = list(attempts)
        if self.attempts:
            msg = f"All {len(self.attempts)} model paths failed. Last error: {self.last_error}"
        else:
            msg = "All model paths failed: no candidate paths given"
        super().__init__(msg)

    @property
    def last_error(self) -> Optional[str]:
        if not self.attempts:
            return None
        return self.attempts[-1].message


# ── Detection ────────────────────────────────────────────────────────

class DetectionError(HandbridgeError):
    """Raised when the inference backend fails at runtime."""


class NotInitializedError(DetectionError):
    """Detection was requested on a model that is not loaded."""

    def __init__(self, message: str = "HandLandmarker not initialized"):
        super().__init__(message)


# ── Bridge ───────────────────────────────────────────────────────────

class InvalidRequestError(HandbridgeError):
    """A bridge request violates the caller contract."""


__all__ = [
    "HandbridgeError",
    "ConversionError",
    "InvalidPlaneCountError",
    "ZeroDimensionError",
    "BufferSizeError",
    "LoadAttempt",
    "LoadError",
    "AllPathsFailedError",
    "DetectionError",
    "NotInitializedError",
    "InvalidRequestError",
]
