"""Hierarchical exception types for SimpleCom."""

from __future__ import annotations


class SimpleComError(Exception):
    """Base exception for all SimpleCom errors."""


# ── Startup ─────────────────────────────────────────────────────


class ConfigurationError(SimpleComError):
    """Serial parameters are missing or invalid."""


class DeviceOpenError(SimpleComError):
    """Serial device is busy, absent, or access was denied."""

    def __init__(self, port: str, reason: str) -> None:
        super().__init__(f"Open serial {port} failed: {reason}")
        self.port = port
        self.reason = reason


class IOInitError(SimpleComError):
    """Console mode or redirector setup failed before the session started."""


# ── Session ─────────────────────────────────────────────────────


class FatalIOError(SimpleComError):
    """Device read or write failed during an active session."""


class ReadCancelledError(SimpleComError):
    """Outstanding device read was cancelled by the shutdown sequence."""
