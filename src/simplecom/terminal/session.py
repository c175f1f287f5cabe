"""Session lifecycle: start both redirectors, then drain and release in order."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from simplecom.config import Settings
from simplecom.shared.enums import SessionPhase
from simplecom.shared.exceptions import FatalIOError, IOInitError
from simplecom.shared.models import SerialConfig
from simplecom.terminal.channel import SerialChannel
from simplecom.terminal.console import create_console, format_title
from simplecom.terminal.interfaces import Confirmer, Console, DeviceChannel
from simplecom.terminal.redirector import DEFAULT_CHUNK_SIZE, run_input_redirector, run_output_redirector
from simplecom.terminal.reporter import ConsolePrompt
from simplecom.terminal.state import SessionState

logger = logging.getLogger(__name__)


class TerminalSession:
    """Owns the device channel, the console mode and the output redirector task.

    Use as an async context manager; the channel is closed and the console
    restored on every exit path, including a failed start.
    """

    def __init__(
        self,
        channel: DeviceChannel,
        console: Console,
        *,
        port_name: str,
        confirm: Confirmer | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        app_name: str = "SimpleCom",
        drain_timeout: float = 2.0,
    ) -> None:
        self.state = SessionState(port_name=port_name)
        self._channel = channel
        self._console = console
        self._confirm = confirm
        self._chunk_size = chunk_size
        self._app_name = app_name
        self._drain_timeout = drain_timeout
        self._phase = SessionPhase.CONFIGURING
        self._console_active = False
        self._output_task: asyncio.Task[FatalIOError | None] | None = None

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    def _transition(self, phase: SessionPhase) -> None:
        logger.debug("session %s: %s -> %s", self.state.port_name, self._phase.value, phase.value)
        self._phase = phase

    async def __aenter__(self) -> TerminalSession:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    async def start(self) -> None:
        """Enter raw console mode and launch the output redirector.

        Raises:
            IOInitError: If either step fails; the channel is released first.
        """
        if self._phase is not SessionPhase.CONFIGURING:
            raise RuntimeError(f"session already started ({self._phase.value})")
        try:
            self._console.__enter__()
            self._console_active = True
            self._console.set_title(format_title(self.state.port_name, False, app_name=self._app_name))
            self._output_task = asyncio.create_task(
                run_output_redirector(self._channel, self._console, self.state),
                name="output-redirector",
            )
        except IOInitError:
            self._close()
            raise
        except (OSError, RuntimeError) as exc:
            self._close()
            raise IOInitError(f"cannot start session on {self.state.port_name}: {exc}") from exc
        self._transition(SessionPhase.CONNECTED)
        logger.info("session on %s connected", self.state.port_name)

    async def run(self) -> FatalIOError | None:
        """Run the input redirector until exit, then shut the session down.

        Returns the I/O error that ended the session, or ``None`` on a normal exit.
        """
        if self._phase is not SessionPhase.CONNECTED or self._output_task is None:
            raise RuntimeError(f"session is not connected ({self._phase.value})")

        input_task = asyncio.create_task(
            run_input_redirector(
                self._console,
                self._channel,
                self.state,
                confirm=self._confirm,
                chunk_size=self._chunk_size,
                app_name=self._app_name,
            ),
            name="input-redirector",
        )
        try:
            await asyncio.wait({input_task, self._output_task}, return_when=asyncio.FIRST_COMPLETED)
            if not input_task.done():
                # Output path died first; a pending console read must not hold the session open.
                input_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await input_task
                error = self._output_task.result()
            else:
                error = input_task.result()
                # Output may have failed first and stopped the input loop through the shared flag.
                if error is None and self._output_task.done() and not self._output_task.cancelled():
                    error = self._output_task.result()
        finally:
            if not input_task.done():
                input_task.cancel()
        await self.shutdown()
        return error

    async def shutdown(self) -> None:
        """Cancel the output read, wait for it to return, then release resources."""
        if self._phase is SessionPhase.CLOSED:
            return
        if self._phase is SessionPhase.CONFIGURING:
            self._close()
            return

        if self._phase is SessionPhase.CONNECTED:
            self._transition(SessionPhase.EXIT_REQUESTED)
        self.state.terminate()
        self._transition(SessionPhase.DRAINING)
        try:
            self._channel.cancel_read()
            await self._drain_output()
        finally:
            self._close()

    async def _drain_output(self) -> None:
        task = self._output_task
        if task is None:
            return
        if not task.done():
            done, _ = await asyncio.wait({task}, timeout=self._drain_timeout)
            if not done:
                logger.warning(
                    "output redirector on %s still running after %.1fs; cancelling",
                    self.state.port_name,
                    self._drain_timeout,
                )
                task.cancel()
                await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            logger.error("output redirector crashed: %r", task.exception())

    def _close(self) -> None:
        try:
            if self._console_active:
                self._console_active = False
                self._console.__exit__(None, None, None)
        finally:
            self._channel.close()
            self._transition(SessionPhase.CLOSED)
            logger.info("session on %s closed", self.state.port_name)


async def run_session(
    config: SerialConfig,
    settings: Settings,
    *,
    interactive: bool,
    console: Console | None = None,
) -> FatalIOError | None:
    """Open the device described by ``config`` and run one terminal session.

    Raises:
        IOInitError: If the console cannot be prepared
        DeviceOpenError: If the serial port cannot be opened
    """
    if console is None:
        try:
            console = create_console()
        except (OSError, ValueError) as exc:
            raise IOInitError(f"no usable console: {exc}") from exc

    channel = SerialChannel.open(config, batch=settings.batch_reads)
    confirm = ConsolePrompt(console) if interactive and settings.confirm_exit else None
    async with TerminalSession(
        channel,
        console,
        port_name=config.port,
        confirm=confirm,
        chunk_size=settings.chunk_size,
        app_name=settings.app_name,
        drain_timeout=settings.drain_timeout_seconds,
    ) as session:
        return await session.run()
