"""Domain enumerations used across all modules."""

from __future__ import annotations

from enum import Enum, IntEnum, unique


@unique
class ControlCommand(str, Enum):
    """Classification of one console input chunk."""

    NONE = "none"
    EXIT = "exit"
    TOGGLE_PAUSE = "toggle_pause"


@unique
class SessionPhase(str, Enum):
    """Lifecycle states for one terminal session."""

    CONFIGURING = "configuring"
    CONNECTED = "connected"
    EXIT_REQUESTED = "exit_requested"
    DRAINING = "draining"
    CLOSED = "closed"


@unique
class Parity(str, Enum):
    NONE = "none"
    ODD = "odd"
    EVEN = "even"
    MARK = "mark"
    SPACE = "space"


@unique
class FlowControl(str, Enum):
    NONE = "none"
    HARDWARE = "hardware"
    SOFTWARE = "software"


@unique
class ExitCode(IntEnum):
    """Process exit status returned by the CLI."""

    OK = 0
    ERROR = 1
    CONFIGURATION = 2
    IO_INIT = 3
    DEVICE_OPEN = 4
    INTERRUPTED = 130
