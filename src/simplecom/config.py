"""Centralised configuration via Pydantic Settings."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError
from pydantic_settings import BaseSettings

from simplecom.shared.exceptions import ConfigurationError
from simplecom.shared.models import SerialConfig


class Settings(BaseSettings):
    """Application-wide configuration loaded from environment variables."""

    model_config = {"env_prefix": "SIMPLECOM_", "frozen": True}

    # Serial line
    port: str = ""
    baud_rate: int = 115200
    byte_size: int = 8
    parity: str = "none"
    stop_bits: float = 1
    flow_control: str = "none"
    write_timeout: float | None = None

    # Engine
    # Console reads are capped at this many units per chunk.
    chunk_size: int = 2048
    # Drain whatever the driver already holds after each blocking 1-byte read.
    batch_reads: bool = True
    drain_timeout_seconds: float = 2.0

    # UI
    app_name: str = "SimpleCom"
    confirm_exit: bool = True

    # Logging
    # Empty log_file means stderr.
    log_level: str = "WARNING"
    log_file: str = ""

    def serial_config(self, **overrides: Any) -> SerialConfig:
        """Build a validated SerialConfig; explicit overrides win over settings.

        Raises:
            ConfigurationError: If the port is missing or a parameter is invalid.
        """
        values: dict[str, Any] = {
            "port": self.port,
            "baud_rate": self.baud_rate,
            "byte_size": self.byte_size,
            "parity": self.parity,
            "stop_bits": self.stop_bits,
            "flow_control": self.flow_control,
            "write_timeout": self.write_timeout,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        if not str(values["port"]).strip():
            raise ConfigurationError("serial port is required (argument or SIMPLECOM_PORT)")
        if float(values["stop_bits"]).is_integer():
            values["stop_bits"] = int(float(values["stop_bits"]))
        try:
            return SerialConfig.model_validate(values)
        except ValidationError as exc:
            raise ConfigurationError(_describe_validation_error(exc)) from exc


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ())) or "config"
        parts.append(f"{field}: {error.get('msg', 'invalid value')}")
    return "invalid serial configuration (" + "; ".join(parts) + ")"


def get_settings() -> Settings:
    """Factory, overridable in tests."""
    return Settings()
