"""Model asset and home directory path utilities.

Centralizes model storage to ``~/.handbridge/models`` by default.
Override with ``HANDBRIDGE_MODELS_DIR`` or ``HANDBRIDGE_HOME`` environment
variables, or point ``HANDBRIDGE_MODEL_PATH`` at a specific ``.task`` file.
"""

import logging
import os
import urllib.request
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "hand_landmarker.task"

HAND_LANDMARKER_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/1/hand_landmarker.task"
)


def get_home_dir() -> Path:
    """Return the handbridge home directory, creating it if needed.

    Resolution order:
        1. ``HANDBRIDGE_HOME`` environment variable.
        2. ``~/.handbridge`` (default).

    Returns:
        Absolute path to the home directory.
    """
    home = os.environ.get("HANDBRIDGE_HOME")
    if home:
        home_dir = Path(home)
    else:
        home_dir = Path.home() / ".handbridge"
    home_dir.mkdir(parents=True, exist_ok=True)
    return home_dir


def get_models_dir() -> Path:
    """Return the models directory, creating it if it doesn't exist.

    Resolution order:
        1. ``HANDBRIDGE_MODELS_DIR`` environment variable (absolute or
           relative to CWD).
        2. ``{home}/models`` where *home* is from :func:`get_home_dir`.

    Returns:
        Absolute path to the models directory.
    """
    env_val = os.environ.get("HANDBRIDGE_MODELS_DIR")
    if env_val:
        models_dir = Path(env_val)
        if not models_dir.is_absolute():
            models_dir = Path.cwd() / models_dir
    else:
        models_dir = get_home_dir() / "models"
    models_dir.mkdir(parents=True, exist_ok=True)
    return models_dir


def default_model_candidates(model_name: str = DEFAULT_MODEL_NAME) -> List[Path]:
    """Return the ordered list of places to look for the model asset.

    Order:
        1. ``HANDBRIDGE_MODEL_PATH`` if set.
        2. ``{models_dir}/{model_name}``.
        3. ``{CWD}/assets/{model_name}``.
        4. ``{CWD}/{model_name}``.
    """
    candidates: List[Path] = []
    explicit = os.environ.get("HANDBRIDGE_MODEL_PATH")
    if explicit:
        candidates.append(Path(explicit))
    candidates.append(get_models_dir() / model_name)
    candidates.append(Path.cwd() / "assets" / model_name)
    candidates.append(Path.cwd() / model_name)
    return candidates


def download_model(
    dest: Optional[Path] = None,
    url: str = HAND_LANDMARKER_MODEL_URL,
) -> Path:
    """Download the hand landmarker model if it is not already present.

    Args:
        dest: Target file. Defaults to ``{models_dir}/hand_landmarker.task``.
        url: Download URL.

    Returns:
        Path to the model file.

    Raises:
        RuntimeError: If the download fails.
    """
    model_path = Path(dest) if dest is not None else get_models_dir() / DEFAULT_MODEL_NAME
    if model_path.exists():
        return model_path

    model_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Downloading hand landmarker model to {model_path}...")
    try:
        urllib.request.urlretrieve(url, model_path)
    except Exception as e:
        if model_path.exists():
            model_path.unlink()
        raise RuntimeError(
            f"Failed to download hand landmarker model: {e}\n"
            f"You can manually download from: {url}\n"
            f"And save to: {model_path}"
        ) from e
    logger.info("Download complete.")
    return model_path


__all__ = [
    "DEFAULT_MODEL_NAME",
    "HAND_LANDMARKER_MODEL_URL",
    "get_home_dir",
    "get_models_dir",
    "default_model_candidates",
    "download_model",
]
