"""Model loading with ordered fallback over candidate locations.

Example:
    >>> handle = load(["/opt/models/hand_landmarker.task",
    ...                "assets/hand_landmarker.task"], ModelConfig())
    >>> handle.model_path
    PosixPath('assets/hand_landmarker.task')
"""

from enum import Enum
from os import PathLike
from pathlib import Path
from typing import Iterable, List, Optional, Union
import logging
import threading

from handbridge.backends.base import BackendFactory, LandmarkerBackend
from handbridge.config import ModelConfig
from handbridge.errors import (
    AllPathsFailedError,
    DetectionError,
    HandbridgeError,
    LoadAttempt,
    NotInitializedError,
)
from handbridge.types import CanonicalImage, DetectionResult

logger = logging.getLogger(__name__)

PathSpec = Union[str, PathLike]


class HandleState(Enum):
    LOADED = "loaded"
    RELEASED = "released"


class ModelHandle:
    """A loaded model plus the lock that serializes access to it.

    The underlying runtime is not assumed to be safe for concurrent use, so
    ``detect`` and ``close`` run one at a time.
    """

    def __init__(self, backend: LandmarkerBackend, model_path: Path, config: ModelConfig):
        self._backend: Optional[LandmarkerBackend] = backend
        self._model_path = model_path
        self._config = config
        self._state = HandleState.LOADED
        self._lock = threading.Lock()

    @property
    def model_path(self) -> Path:
        return self._model_path

    @property
    def config(self) -> ModelConfig:
        return self._config

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state is HandleState.LOADED

    def detect(self, image: CanonicalImage, timestamp_ms: Optional[int] = None) -> DetectionResult:
        """Run the model on one image.

        Raises:
            NotInitializedError: If the handle has been released.
            DetectionError: If the backend fails.
        """
        with self._lock:
            if self._state is not HandleState.LOADED or self._backend is None:
                raise NotInitializedError("Model handle has been released")
            try:
                return self._backend.detect(image, timestamp_ms)
            except HandbridgeError:
                raise
            except Exception as e:
                raise DetectionError(f"Hand landmark detection failed: {e}") from e

    def close(self) -> None:
        """Release the model. Calling it again is a no-op."""
        with self._lock:
            if self._state is HandleState.RELEASED:
                return
            backend, self._backend = self._backend, None
            self._state = HandleState.RELEASED
        if backend is not None:
            backend.close()
        logger.debug(f"Released model handle for {self._model_path}")

    def __repr__(self) -> str:
        return f"ModelHandle(path={str(self._model_path)!r}, state={self._state.value})"


def _default_factory() -> BackendFactory:
    from handbridge.backends.mediapipe_hands import create_backend

    return create_backend


def load(
    candidates: Iterable[PathSpec],
    config: Optional[ModelConfig] = None,
    backend_factory: Optional[BackendFactory] = None,
) -> ModelHandle:
    """Load a model from the first candidate path that works.

    A candidate wins when the file exists and the backend initializes from
    it; later candidates are not touched. Failed candidates are logged and
    recorded, and loading moves on to the next one.

    Args:
        candidates: Ordered model file locations.
        config: Model options. Defaults to ``ModelConfig()``.
        backend_factory: Creates a backend from (path, config). Defaults to
            the MediaPipe HandLandmarker backend.

    Returns:
        A loaded ModelHandle. The caller owns it and must close it.

    Raises:
        AllPathsFailedError: If no candidate could be loaded.
    """
    config = config or ModelConfig()
    candidates = [Path(c) for c in candidates]
    attempts: List[LoadAttempt] = []

    if not candidates:
        logger.error("All paths failed: no model candidates given")
        raise AllPathsFailedError(attempts)

    factory = backend_factory or _default_factory()

    for path in candidates:
        logger.debug(f"Trying model path: {path}")
        try:
            if not path.is_file():
                raise FileNotFoundError(f"Model asset not found: {path}")
            backend = factory(path, config)
        except Exception as e:
            attempts.append(LoadAttempt(path=path, message=str(e)))
            logger.warning(f"Failed path {path}: {e}")
            continue

        logger.info(f"Hand landmark model loaded from: {path}")
        return ModelHandle(backend, path, config)

    error = AllPathsFailedError(attempts)
    logger.error(f"All paths failed. Last error: {error.last_error}")
    raise error


__all__ = ["PathSpec", "HandleState", "ModelHandle", "load"]
