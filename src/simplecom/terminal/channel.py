"""pyserial-backed device channel with cancellable async reads."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from typing import Any, Callable, TypeVar

import serial
from serial.tools import list_ports

from simplecom.shared.enums import FlowControl, Parity
from simplecom.shared.exceptions import DeviceOpenError, FatalIOError, ReadCancelledError
from simplecom.shared.models import SerialConfig

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

_PARITY = {
    Parity.NONE: serial.PARITY_NONE,
    Parity.ODD: serial.PARITY_ODD,
    Parity.EVEN: serial.PARITY_EVEN,
    Parity.MARK: serial.PARITY_MARK,
    Parity.SPACE: serial.PARITY_SPACE,
}

_STOP_BITS = {
    1: serial.STOPBITS_ONE,
    1.5: serial.STOPBITS_ONE_POINT_FIVE,
    2: serial.STOPBITS_TWO,
}

# Backends without cancel_read() fall back to polling the cancel flag.
_POLL_TIMEOUT_SECONDS = 0.5


def list_available_ports() -> list[tuple[str, str]]:
    """Return ``(device, description)`` for every serial port on the host."""
    return sorted((info.device, info.description) for info in list_ports.comports())


def _configure(port: serial.SerialBase, config: SerialConfig) -> None:
    port.baudrate = config.baud_rate
    port.bytesize = config.byte_size
    port.parity = _PARITY[config.parity]
    port.stopbits = _STOP_BITS[config.stop_bits]
    port.rtscts = config.flow_control == FlowControl.HARDWARE
    port.xonxoff = config.flow_control == FlowControl.SOFTWARE
    port.write_timeout = config.write_timeout
    port.timeout = None if hasattr(port, "cancel_read") else _POLL_TIMEOUT_SECONDS
    if hasattr(port, "exclusive"):
        port.exclusive = True


class SerialChannel:
    """Owns one open serial port and exposes it as a :class:`DeviceChannel`.

    Each direction allows a single outstanding operation; issuing another
    read (or write) before the previous one completes is a programming error.
    Blocking pyserial calls run on daemon threads, so a read the backend
    cannot cancel is abandoned at exit and the port is closed once it returns.
    """

    def __init__(self, port: serial.SerialBase, *, batch: bool = True) -> None:
        self._serial = port
        self._batch = batch
        self._read_pending = False
        self._write_pending = False
        self._read_cancelled = threading.Event()
        self._closed = False
        self._lock = threading.Lock()
        self._active = 0
        self._close_deferred = False

    @classmethod
    def open(cls, config: SerialConfig, *, batch: bool = True) -> SerialChannel:
        """Open ``config.port`` exclusively, apply the line settings and purge stale data.

        Raises:
            DeviceOpenError: If the port cannot be opened or configured.
        """
        try:
            port = serial.serial_for_url(config.port, do_not_open=True)
            _configure(port, config)
            port.open()
        except (serial.SerialException, OSError, ValueError) as exc:
            raise DeviceOpenError(config.port, str(exc)) from exc

        try:
            port.reset_input_buffer()
            port.reset_output_buffer()
        except (serial.SerialException, OSError) as exc:
            port.close()
            raise DeviceOpenError(config.port, f"purge failed: {exc}") from exc

        logger.info(
            "opened %s (%d baud, %d%s%s, flow=%s)",
            config.port,
            config.baud_rate,
            config.byte_size,
            _PARITY[config.parity],
            config.stop_bits,
            config.flow_control.value,
        )
        return cls(port, batch=batch)

    @property
    def name(self) -> str:
        return str(self._serial.port)

    @property
    def closed(self) -> bool:
        return self._closed

    async def read(self) -> bytes:
        if self._read_pending:
            raise RuntimeError("device read already pending")
        self._read_pending = True
        try:
            return await self._run_in_thread(self._blocking_read)
        finally:
            self._read_pending = False

    async def write(self, data: bytes) -> int:
        if self._write_pending:
            raise RuntimeError("device write already pending")
        self._write_pending = True
        try:
            return await self._run_in_thread(self._blocking_write, data)
        finally:
            self._write_pending = False

    def cancel_read(self) -> None:
        self._read_cancelled.set()
        cancel = getattr(self._serial, "cancel_read", None)
        if cancel is not None and not self._closed:
            cancel()

    def close(self) -> None:
        """Release the port, or hand that to the last blocked operation still using it."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._active:
                self._close_deferred = True
                logger.warning(
                    "%s still has %d blocked operation(s); closing when they return", self.name, self._active
                )
                return
        self._release()

    def _release(self) -> None:
        self._serial.close()
        logger.info("closed %s", self.name)

    async def _run_in_thread(self, func: Callable[..., _T], *args: Any) -> _T:
        # Daemon threads: a device call that ignores cancellation must not keep the process alive.
        loop = asyncio.get_running_loop()
        future: asyncio.Future[_T] = loop.create_future()

        def _settle(result: _T | None, exc: Exception | None) -> None:
            if future.done():
                return
            if exc is not None:
                future.set_exception(exc)
            else:
                future.set_result(result)  # type: ignore[arg-type]

        def _worker() -> None:
            result: _T | None = None
            error: Exception | None = None
            try:
                result = func(*args)
            except Exception as exc:
                error = exc
            finally:
                with self._lock:
                    self._active -= 1
                    release = self._close_deferred and not self._active
                    if release:
                        self._close_deferred = False
                if release:
                    self._release()
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(_settle, result, error)

        with self._lock:
            if self._closed:
                raise FatalIOError(f"{self.name} is closed")
            self._active += 1
        thread = threading.Thread(target=_worker, name=f"serial-{func.__name__}", daemon=True)
        try:
            thread.start()
        except RuntimeError:
            with self._lock:
                self._active -= 1
            raise
        return await future

    def _blocking_read(self) -> bytes:
        while True:
            if self._read_cancelled.is_set():
                raise ReadCancelledError(f"read on {self.name} cancelled")
            try:
                data = self._serial.read(1)
                if data and self._batch:
                    waiting = self._serial.in_waiting
                    if waiting:
                        data += self._serial.read(waiting)
            except (serial.SerialException, OSError) as exc:
                if self._read_cancelled.is_set():
                    raise ReadCancelledError(f"read on {self.name} cancelled") from exc
                raise FatalIOError(f"read from {self.name} failed: {exc}") from exc
            if self._read_cancelled.is_set():
                raise ReadCancelledError(f"read on {self.name} cancelled")
            if data:
                return bytes(data)

    def _blocking_write(self, data: bytes) -> int:
        try:
            written = self._serial.write(data)
            self._serial.flush()
        except (serial.SerialException, OSError) as exc:
            raise FatalIOError(f"write to {self.name} failed: {exc}") from exc
        return len(data) if written is None else int(written)
