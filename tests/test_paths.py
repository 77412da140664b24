"""Tests for handbridge.paths: home, models directory and model candidates."""

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Ensure path env vars are unset unless explicitly set by a test."""
    monkeypatch.delenv("HANDBRIDGE_HOME", raising=False)
    monkeypatch.delenv("HANDBRIDGE_MODELS_DIR", raising=False)
    monkeypatch.delenv("HANDBRIDGE_MODEL_PATH", raising=False)


# ── get_home_dir ─────────────────────────────────────────────────────

class TestGetHomeDir:
    def test_default_under_user_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        from handbridge.paths import get_home_dir

        result = get_home_dir()
        assert result == tmp_path / ".handbridge"
        assert result.is_dir()

    def test_home_override(self, tmp_path, monkeypatch):
        custom = tmp_path / "deep" / "custom_home"
        monkeypatch.setenv("HANDBRIDGE_HOME", str(custom))
        from handbridge.paths import get_home_dir

        result = get_home_dir()
        assert result == custom
        assert result.is_dir()


# ── get_models_dir ───────────────────────────────────────────────────

class TestGetModelsDir:
    def test_default_under_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HANDBRIDGE_HOME", str(tmp_path / "home"))
        from handbridge.paths import get_models_dir

        result = get_models_dir()
        assert result == tmp_path / "home" / "models"
        assert result.is_dir()

    def test_models_dir_absolute(self, tmp_path, monkeypatch):
        custom = tmp_path / "my_models"
        monkeypatch.setenv("HANDBRIDGE_MODELS_DIR", str(custom))
        from handbridge.paths import get_models_dir

        assert get_models_dir() == custom
        assert custom.is_dir()

    def test_models_dir_relative(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HANDBRIDGE_MODELS_DIR", "rel_models")
        from handbridge.paths import get_models_dir

        assert get_models_dir() == tmp_path / "rel_models"


# ── default_model_candidates ─────────────────────────────────────────

class TestDefaultModelCandidates:
    def test_order_without_explicit_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HANDBRIDGE_MODELS_DIR", str(tmp_path / "models"))
        from handbridge.paths import DEFAULT_MODEL_NAME, default_model_candidates

        assert default_model_candidates() == [
            tmp_path / "models" / DEFAULT_MODEL_NAME,
            tmp_path / "assets" / DEFAULT_MODEL_NAME,
            tmp_path / DEFAULT_MODEL_NAME,
        ]

    def test_explicit_path_first(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HANDBRIDGE_MODELS_DIR", str(tmp_path / "models"))
        monkeypatch.setenv("HANDBRIDGE_MODEL_PATH", "/opt/hands.task")
        from handbridge.paths import default_model_candidates

        candidates = default_model_candidates()
        assert candidates[0] == Path("/opt/hands.task")
        assert len(candidates) == 4

    def test_custom_model_name(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HANDBRIDGE_MODELS_DIR", str(tmp_path))
        from handbridge.paths import default_model_candidates

        assert all(p.name == "hands_lite.task" for p in default_model_candidates("hands_lite.task"))


# ── download_model ───────────────────────────────────────────────────

class TestDownloadModel:
    def test_existing_file_is_not_downloaded(self, tmp_path, monkeypatch):
        from handbridge import paths

        dest = tmp_path / "hand_landmarker.task"
        dest.write_bytes(b"model")

        def fail(*args, **kwargs):
            raise AssertionError("should not download")

        monkeypatch.setattr(paths.urllib.request, "urlretrieve", fail)
        assert paths.download_model(dest) == dest

    def test_failed_download_removes_partial_file(self, tmp_path, monkeypatch):
        from handbridge import paths

        dest = tmp_path / "sub" / "hand_landmarker.task"

        def partial(url, filename):
            Path(filename).write_bytes(b"trunc")
            raise OSError("connection reset")

        monkeypatch.setattr(paths.urllib.request, "urlretrieve", partial)

        with pytest.raises(RuntimeError, match="connection reset"):
            paths.download_model(dest)
        assert not dest.exists()

    def test_download_to_models_dir(self, tmp_path, monkeypatch):
        from handbridge import paths

        monkeypatch.setenv("HANDBRIDGE_MODELS_DIR", str(tmp_path))
        fetched = []

        def fake_retrieve(url, filename):
            fetched.append(url)
            Path(filename).write_bytes(b"model")

        monkeypatch.setattr(paths.urllib.request, "urlretrieve", fake_retrieve)

        result = paths.download_model()
        assert result == tmp_path / paths.DEFAULT_MODEL_NAME
        assert fetched == [paths.HAND_LANDMARKER_MODEL_URL]
