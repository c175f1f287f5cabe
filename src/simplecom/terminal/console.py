"""Raw pass-through console for POSIX terminals and the Windows console."""

from __future__ import annotations

import asyncio
import logging
import os
import sys

from simplecom.shared.exceptions import IOInitError

if os.name == "nt":  # pragma: no cover - exercised on Windows only
    import ctypes
    from ctypes import wintypes
else:
    import termios
    import tty

logger = logging.getLogger(__name__)

PAUSE_MARKER = " [PAUSE]"


def format_title(port: str, paused: bool, *, app_name: str = "SimpleCom") -> str:
    """Return the console title for a session on ``port``."""
    title = f"{app_name}: {port}"
    if paused:
        title += PAUSE_MARKER
    return title


def _write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        sent = os.write(fd, view)
        view = view[sent:]


class PosixConsole:
    """Terminal on a POSIX tty, switched to raw mode for the session.

    Input is read through the event loop's reader callbacks so a pending
    read can be cancelled like any other coroutine.
    """

    def __init__(self, *, stdin_fd: int | None = None, stdout_fd: int | None = None) -> None:
        self._in_fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
        self._out_fd = sys.stdout.fileno() if stdout_fd is None else stdout_fd
        self._saved: list | None = None

    def __enter__(self) -> PosixConsole:
        try:
            self._saved = termios.tcgetattr(self._in_fd)
            tty.setraw(self._in_fd)
        except (termios.error, OSError) as exc:
            raise IOInitError(f"cannot switch console to raw mode: {exc}") from exc
        logger.debug("console fd %d switched to raw mode", self._in_fd)
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._saved is None:
            return
        termios.tcsetattr(self._in_fd, termios.TCSADRAIN, self._saved)
        self._saved = None
        logger.debug("console fd %d restored", self._in_fd)

    async def read(self, size: int) -> bytes:
        loop = asyncio.get_running_loop()
        ready: asyncio.Future[None] = loop.create_future()

        def _on_readable() -> None:
            if not ready.done():
                ready.set_result(None)

        loop.add_reader(self._in_fd, _on_readable)
        try:
            await ready
        finally:
            loop.remove_reader(self._in_fd)
        return os.read(self._in_fd, size)

    def write(self, data: bytes) -> None:
        _write_all(self._out_fd, data)

    def set_title(self, title: str) -> None:
        self.write(f"\x1b]0;{title}\x07".encode())


class WindowsConsole:  # pragma: no cover - exercised on Windows only
    """Windows console with line input off and virtual-terminal sequences on."""

    STD_INPUT_HANDLE = -10
    STD_OUTPUT_HANDLE = -11
    ENABLE_PROCESSED_INPUT = 0x0001
    ENABLE_LINE_INPUT = 0x0002
    ENABLE_ECHO_INPUT = 0x0004
    ENABLE_VIRTUAL_TERMINAL_INPUT = 0x0200
    ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004

    def __init__(self) -> None:
        self._kernel32 = ctypes.windll.kernel32
        self._in_handle = self._kernel32.GetStdHandle(self.STD_INPUT_HANDLE)
        self._out_handle = self._kernel32.GetStdHandle(self.STD_OUTPUT_HANDLE)
        self._saved: tuple[int, int] | None = None

    def _get_mode(self, handle: int) -> int:
        mode = wintypes.DWORD()
        if not self._kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
            raise IOInitError(f"GetConsoleMode failed (error {ctypes.GetLastError()})")
        return mode.value

    def _set_mode(self, handle: int, mode: int) -> None:
        if not self._kernel32.SetConsoleMode(handle, mode):
            raise IOInitError(f"SetConsoleMode failed (error {ctypes.GetLastError()})")

    def __enter__(self) -> WindowsConsole:
        in_mode = self._get_mode(self._in_handle)
        out_mode = self._get_mode(self._out_handle)
        raw_in = in_mode & ~(self.ENABLE_PROCESSED_INPUT | self.ENABLE_LINE_INPUT | self.ENABLE_ECHO_INPUT)
        self._set_mode(self._in_handle, raw_in | self.ENABLE_VIRTUAL_TERMINAL_INPUT)
        self._set_mode(self._out_handle, out_mode | self.ENABLE_VIRTUAL_TERMINAL_PROCESSING)
        self._saved = (in_mode, out_mode)
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._saved is None:
            return
        in_mode, out_mode = self._saved
        self._kernel32.SetConsoleMode(self._in_handle, in_mode)
        self._kernel32.SetConsoleMode(self._out_handle, out_mode)
        self._saved = None

    async def read(self, size: int) -> bytes:
        return await asyncio.to_thread(os.read, sys.stdin.fileno(), size)

    def write(self, data: bytes) -> None:
        _write_all(sys.stdout.fileno(), data)

    def set_title(self, title: str) -> None:
        self._kernel32.SetConsoleTitleW(title)


def create_console() -> PosixConsole | WindowsConsole:
    """Return the console implementation for the running platform."""
    if os.name == "nt":
        return WindowsConsole()
    return PosixConsole()
