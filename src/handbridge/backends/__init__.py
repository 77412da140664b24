from handbridge.backends.base import BackendFactory, LandmarkerBackend

__all__ = ["BackendFactory", "LandmarkerBackend"]
