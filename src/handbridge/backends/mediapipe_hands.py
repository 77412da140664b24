"""MediaPipe HandLandmarker backend."""

from pathlib import Path
from typing import Optional
import logging
import time

from handbridge.config import ModelConfig, RunningMode
from handbridge.types import CanonicalImage, DetectionResult, Hand, Landmark

logger = logging.getLogger(__name__)


class MediaPipeHandsBackend:
    """MediaPipe Tasks HandLandmarker backend.

    Uses MediaPipe Tasks API (0.10.x+). Detects up to ``max_hands`` hands
    and provides 21 normalized landmarks per hand.

    In STREAM mode the landmarker runs ``detect_for_video`` and needs
    strictly increasing timestamps. A caller timestamp is used when given,
    otherwise a monotonic clock is read; either is bumped forward if it
    would not increase.

    Args:
        model_path: Path to a ``hand_landmarker.task`` asset.
        config: Model options.
    """

    def __init__(self, model_path: Path, config: ModelConfig):
        try:
            import mediapipe as mp
            from mediapipe.tasks import python
            from mediapipe.tasks.python import vision
        except ImportError as e:
            raise ImportError(
                "MediaPipe is required for hand landmark detection. "
                "Install it with: pip install handbridge[mediapipe]"
            ) from e

        self._mp = mp
        self._config = config
        self._model_path = Path(model_path)
        self._last_timestamp_ms = -1

        delegate = (
            python.BaseOptions.Delegate.GPU
            if config.delegate == "gpu"
            else python.BaseOptions.Delegate.CPU
        )
        base_options = python.BaseOptions(
            model_asset_path=str(self._model_path),
            delegate=delegate,
        )
        running_mode = (
            vision.RunningMode.VIDEO
            if config.running_mode is RunningMode.STREAM
            else vision.RunningMode.IMAGE
        )
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=running_mode,
            num_hands=config.max_hands,
            min_hand_detection_confidence=config.min_detection_confidence,
            min_hand_presence_confidence=config.min_presence_confidence,
            min_tracking_confidence=config.min_tracking_confidence,
        )
        self._landmarker = vision.HandLandmarker.create_from_options(options)
        logger.info(f"MediaPipe HandLandmarker initialized with: {self._model_path}")

    def detect(
        self, image: CanonicalImage, timestamp_ms: Optional[int] = None
    ) -> DetectionResult:
        if self._landmarker is None:
            raise RuntimeError("HandLandmarker already closed")

        mp_image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=image.rgb())

        if self._config.running_mode is RunningMode.STREAM:
            ts = self._next_timestamp(timestamp_ms)
            result = self._landmarker.detect_for_video(mp_image, ts)
        else:
            result = self._landmarker.detect(mp_image)

        return to_detection_result(result)

    def close(self) -> None:
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
            logger.info("MediaPipe HandLandmarker closed")

    def _next_timestamp(self, timestamp_ms: Optional[int]) -> int:
        if timestamp_ms is None:
            timestamp_ms = int(time.monotonic() * 1000)
        ts = max(int(timestamp_ms), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = ts
        return ts


def to_detection_result(result) -> DetectionResult:
    """Convert a MediaPipe ``HandLandmarkerResult`` to a DetectionResult.

    Hand order and landmark order are kept as produced by the model.
    """
    hands = []
    if result is None or not result.hand_landmarks:
        return DetectionResult(hands=hands)

    for idx, hand_lms in enumerate(result.hand_landmarks):
        handedness = ""
        score = 0.0
        if result.handedness and idx < len(result.handedness):
            # handedness is a list of categories, best first
            categories = result.handedness[idx]
            if categories:
                handedness = categories[0].category_name
                score = float(categories[0].score)

        landmarks = [Landmark(x=float(lm.x), y=float(lm.y), z=float(lm.z)) for lm in hand_lms]
        hands.append(Hand(landmarks=landmarks, handedness=handedness, score=score))

    return DetectionResult(hands=hands)


def create_backend(model_path: Path, config: ModelConfig) -> MediaPipeHandsBackend:
    """Backend factory used by the model loader by default."""
    return MediaPipeHandsBackend(model_path, config)


__all__ = ["MediaPipeHandsBackend", "to_detection_result", "create_backend"]
