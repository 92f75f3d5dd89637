"""Exception types for shutterguide.

Only programmer and configuration mistakes raise. Missing inputs (no face,
no sensor data, zero-area boxes) are absorbed by the estimators as zero
confidence so the guidance loop can keep running every tick.
"""


class ShutterGuideError(Exception):
    """Base class for all shutterguide errors."""


class ConfigurationError(ShutterGuideError, ValueError):
    """Invalid engine or angle configuration.

    Raised eagerly when a configuration is built or loaded, never from
    inside a per-tick evaluation.
    """


class SessionError(ShutterGuideError):
    """Malformed recorded session (replay input)."""

    def __init__(self, message: str, line: int = 0):
        self.line = line
        if line:
            message = f"line {line}: {message}"
        super().__init__(message)


__all__ = ["ShutterGuideError", "ConfigurationError", "SessionError"]
