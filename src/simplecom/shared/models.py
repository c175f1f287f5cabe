"""Frozen Pydantic domain models shared by all modules."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from simplecom.shared.enums import FlowControl, Parity


class SerialConfig(BaseModel):
    """Finalized serial line parameters, applied once before a session starts."""

    model_config = {"frozen": True}

    port: str = Field(min_length=1)
    baud_rate: int = Field(default=115200, gt=0)
    byte_size: Literal[5, 6, 7, 8] = 8
    parity: Parity = Parity.NONE
    stop_bits: Literal[1, 1.5, 2] = 1
    flow_control: FlowControl = FlowControl.NONE
    write_timeout: float | None = Field(default=None, ge=0)
