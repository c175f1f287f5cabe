"""In-band control sequences recognised in the console input stream."""

from __future__ import annotations

from simplecom.shared.enums import ControlCommand

ESC = 0x1B

# Function keys as sent by a VT-style console.
F1_SEQUENCE = b"\x1bOP"
F8_SEQUENCE = b"\x1b[19~"

_COMMANDS: tuple[tuple[bytes, ControlCommand], ...] = (
    (F1_SEQUENCE, ControlCommand.EXIT),
    (F8_SEQUENCE, ControlCommand.TOGGLE_PAUSE),
)


def _units(chunk: bytes | str) -> list[int]:
    if isinstance(chunk, str):
        return [ord(ch) for ch in chunk]
    return list(chunk)


def classify(chunk: bytes | str) -> ControlCommand:
    """Classify one console input chunk.

    A chunk is a command only when it is exactly one of the known sequences.
    Anything else, including unknown escape sequences, is payload.
    """
    units = _units(chunk)
    if len(units) < 2 or units[0] != ESC:
        return ControlCommand.NONE
    for sequence, command in _COMMANDS:
        if units == list(sequence):
            return command
    return ControlCommand.NONE


def mask_payload(chunk: bytes | str) -> bytes:
    """Reduce every input unit to its low 8 bits for the single-byte channel."""
    return bytes(unit & 0xFF for unit in _units(chunk))
