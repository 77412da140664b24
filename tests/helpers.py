"""Shared test helpers for handbridge tests."""

from handbridge.types import DetectionResult, Hand, Landmark, NUM_HAND_LANDMARKS


class FakeBackend:
    """Backend that returns canned results and records its calls."""

    def __init__(self, model_path=None, config=None, hands=None, error=None):
        self.model_path = model_path
        self.config = config
        self.hands = hands or []
        self.error = error
        self.calls = []
        self.close_count = 0

    def detect(self, image, timestamp_ms=None):
        self.calls.append((image, timestamp_ms))
        if self.error is not None:
            raise self.error
        return DetectionResult(hands=list(self.hands))

    def close(self):
        self.close_count += 1


class FakeFactory:
    """Backend factory that records which paths it was asked to load.

    Paths listed in ``failing`` raise instead of producing a backend.
    """

    def __init__(self, hands=None, failing=(), error=None):
        self.hands = hands
        self.failing = {str(p) for p in failing}
        self.error = error
        self.calls = []
        self.backends = []

    def __call__(self, path, config):
        self.calls.append(path)
        if str(path) in self.failing:
            raise RuntimeError(f"corrupt model: {path.name}")
        backend = FakeBackend(path, config, hands=self.hands, error=self.error)
        self.backends.append(backend)
        return backend


def make_hand(offset: float = 0.0, handedness: str = "Right") -> Hand:
    """Create a 21-landmark hand shifted right by ``offset``."""
    landmarks = [
        Landmark(x=0.1 + offset + i * 0.01, y=0.2 + i * 0.02, z=-0.01 * i)
        for i in range(NUM_HAND_LANDMARKS)
    ]
    return Hand(landmarks=landmarks, handedness=handedness, score=0.9)
