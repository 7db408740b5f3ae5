"""
Exception hierarchy for the skeleton tracking pipeline.

Startup errors (ConfigError) are fatal; per-frame errors (DecodeError,
EngineError) are caught at the callback boundary.
"""


class SkeletonTrackingError(Exception):
    """Base class for all skeleton tracking errors."""


class ConfigError(SkeletonTrackingError):
    """Raised when the startup options cannot be resolved into a configuration."""


class DecodeError(SkeletonTrackingError):
    """Raised when an incoming frame cannot be converted to the pipeline's pixel format."""

    def __init__(self, message: str, encoding: str = "unknown"):
        super().__init__(message)
        self.encoding = encoding


class EngineError(SkeletonTrackingError):
    """Raised when the pose engine fails to load a model or process a frame."""
