"""Protocol interfaces for terminal session dependency injection."""

from __future__ import annotations

from typing import Awaitable, Callable, Protocol, runtime_checkable

# Async operator confirmation; ``None`` where no interactive surface exists.
Confirmer = Callable[[], Awaitable[bool]]


@runtime_checkable
class DeviceChannel(Protocol):
    """Protocol for the serial device side of a session."""

    async def read(self) -> bytes:
        """Wait for device data.

        Returns:
            At least one byte, in arrival order

        Raises:
            ReadCancelledError: If cancel_read() aborted the wait
            FatalIOError: If the device failed
        """
        ...

    async def write(self, data: bytes) -> int:
        """Write data to the device and wait for completion.

        Args:
            data: Payload bytes

        Returns:
            Number of bytes written

        Raises:
            FatalIOError: If the device failed
        """
        ...

    def cancel_read(self) -> None:
        """Abort the outstanding read, if any. Safe to call from any context."""
        ...

    def close(self) -> None:
        """Release the device handle. Idempotent."""
        ...


@runtime_checkable
class Console(Protocol):
    """Protocol for the operator console side of a session."""

    async def read(self, size: int) -> bytes:
        """Block until the operator types; return up to ``size`` raw units.

        An empty result means the console input was closed.
        """
        ...

    def write(self, data: bytes) -> None:
        """Write bytes verbatim to the console output."""
        ...

    def set_title(self, title: str) -> None:
        """Update the console window title."""
        ...

    def __enter__(self) -> Console:
        """Switch the console into raw pass-through mode.

        Raises:
            IOInitError: If the console mode cannot be changed
        """
        ...

    def __exit__(self, *exc_info: object) -> None:
        """Restore the console mode saved on entry."""
        ...


@runtime_checkable
class Reporter(Protocol):
    """Protocol for surfacing errors to the operator."""

    def error(self, message: str, *, caption: str = "") -> None: ...
