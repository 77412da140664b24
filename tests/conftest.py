"""Shared fixtures for handbridge tests.

All backends are fakes, so no model asset or MediaPipe install is needed.
"""

import numpy as np
import pytest

from helpers import FakeFactory, make_hand


@pytest.fixture
def model_file(tmp_path):
    """An existing (content-free) model asset."""
    path = tmp_path / "hand_landmarker.task"
    path.write_bytes(b"fake-model")
    return path


@pytest.fixture
def fake_factory():
    return FakeFactory()


@pytest.fixture
def two_hands():
    return [make_hand(0.0, "Right"), make_hand(0.4, "Left")]


@pytest.fixture
def yuv_planes():
    """Factory for uniform YUV420 planes in request form."""
    def _make(width, height, y=128, u=128, v=128):
        uv_width = (width + 1) // 2
        uv_height = (height + 1) // 2
        return [
            {"bytes": bytes([y]) * (width * height), "bytesPerRow": width, "bytesPerPixel": 1},
            {"bytes": bytes([u]) * (uv_width * uv_height), "bytesPerRow": uv_width, "bytesPerPixel": 1},
            {"bytes": bytes([v]) * (uv_width * uv_height), "bytesPerRow": uv_width, "bytesPerPixel": 1},
        ]
    return _make


@pytest.fixture
def rgba_pixels():
    """Deterministic random (H, W, 4) uint8 pixels."""
    def _make(width, height, seed=0):
        rng = np.random.default_rng(seed)
        return rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    return _make
