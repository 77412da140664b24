"""Inference session: runs detection on a loaded model handle.

The module-level :func:`detect` and :func:`close` work on a bare
:class:`~handbridge.loader.ModelHandle`. :class:`InferenceSession` owns one
handle across reloads and tracks whether a model is available.

Example:
    >>> with InferenceSession(ModelConfig()) as session:
    ...     session.load(default_model_candidates())
    ...     result = session.detect(image)
    ...     print(len(result.hands))
"""

from enum import Enum
from typing import Iterable, Optional
import logging
import threading

from handbridge.backends.base import BackendFactory
from handbridge.config import ModelConfig
from handbridge.errors import LoadError, NotInitializedError
from handbridge.loader import ModelHandle, PathSpec, load
from handbridge.types import CanonicalImage, DetectionResult

logger = logging.getLogger(__name__)


def detect(
    handle: Optional[ModelHandle],
    image: CanonicalImage,
    timestamp_ms: Optional[int] = None,
) -> DetectionResult:
    """Run detection on ``image`` with ``handle``.

    Blocks the calling thread for the duration of the forward pass.

    Raises:
        NotInitializedError: If ``handle`` is None or has been released.
        DetectionError: If the backend fails.
    """
    if handle is None:
        raise NotInitializedError()
    return handle.detect(image, timestamp_ms)


def close(handle: Optional[ModelHandle]) -> None:
    """Release ``handle``. Safe to call more than once, and with None."""
    if handle is not None:
        handle.close()


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    CLOSED = "closed"


class InferenceSession:
    """Owns a model handle for the lifetime of a detector.

    A failed load leaves the session without a model; ``detect`` then raises
    NotInitializedError until a later load succeeds.

    Args:
        config: Model options used for every load.
        backend_factory: Backend factory passed to the loader.
    """

    def __init__(
        self,
        config: Optional[ModelConfig] = None,
        backend_factory: Optional[BackendFactory] = None,
    ):
        self._config = config or ModelConfig()
        self._backend_factory = backend_factory
        self._handle: Optional[ModelHandle] = None
        self._state = SessionState.UNINITIALIZED
        self._lock = threading.Lock()

    @property
    def config(self) -> ModelConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def handle(self) -> Optional[ModelHandle]:
        return self._handle

    @property
    def is_loaded(self) -> bool:
        return self._state is SessionState.LOADED

    def load(self, candidates: Iterable[PathSpec]) -> ModelHandle:
        """Load a model, releasing any model this session held before.

        Raises:
            AllPathsFailedError: If no candidate could be loaded. The session
                is left without a model.
        """
        with self._lock:
            self._release_locked()
            handle = load(candidates, self._config, self._backend_factory)
            self._handle = handle
            self._state = SessionState.LOADED
            return handle

    def try_load(self, candidates: Iterable[PathSpec]) -> bool:
        """Like :meth:`load`, but logs failure and returns False instead."""
        try:
            self.load(candidates)
        except LoadError as e:
            logger.error(f"HandLandmarker unavailable: {e}")
            return False
        return True

    def detect(self, image: CanonicalImage, timestamp_ms: Optional[int] = None) -> DetectionResult:
        """Run detection with the session's model.

        Raises:
            NotInitializedError: If no model is loaded.
            DetectionError: If the backend fails.
        """
        return detect(self._handle, image, timestamp_ms)

    def close(self) -> None:
        """Release the model. Calling it again is a no-op."""
        with self._lock:
            self._release_locked()
            self._state = SessionState.CLOSED

    def _release_locked(self) -> None:
        handle, self._handle = self._handle, None
        if self._state is SessionState.LOADED:
            self._state = SessionState.UNINITIALIZED
        close(handle)

    def __enter__(self) -> "InferenceSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["detect", "close", "SessionState", "InferenceSession"]
