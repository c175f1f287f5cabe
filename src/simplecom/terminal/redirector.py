"""Console→device and device→console redirection loops."""

from __future__ import annotations

import logging

from simplecom.shared.enums import ControlCommand
from simplecom.shared.exceptions import FatalIOError, ReadCancelledError
from simplecom.terminal.console import format_title
from simplecom.terminal.control import classify, mask_payload
from simplecom.terminal.interfaces import Confirmer, Console, DeviceChannel
from simplecom.terminal.state import SessionState

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 2048


async def run_input_redirector(
    console: Console,
    channel: DeviceChannel,
    state: SessionState,
    *,
    confirm: Confirmer | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    app_name: str = "SimpleCom",
) -> FatalIOError | None:
    """Forward console input to the device until the session ends.

    Returns the write error that ended the loop, or ``None`` when the
    operator asked to leave (or the console closed).
    """
    logger.info("input redirector starting on %s", state.port_name)
    while not state.terminated:
        chunk = await console.read(chunk_size)
        if not chunk:
            logger.info("console input closed")
            state.terminate()
            return None

        command = classify(chunk)
        if command is ControlCommand.EXIT:
            if confirm is not None and not await confirm():
                logger.debug("exit declined")
                continue
            logger.info("exit requested on %s", state.port_name)
            state.terminate()
            return None
        if command is ControlCommand.TOGGLE_PAUSE:
            paused = state.toggle_pause()
            console.set_title(format_title(state.port_name, paused, app_name=app_name))
            logger.info("session on %s %s", state.port_name, "paused" if paused else "resumed")
            continue

        payload = mask_payload(chunk)
        if state.paused:
            continue
        try:
            await channel.write(payload)
        except FatalIOError as exc:
            logger.error("input redirector stopped: %s", exc)
            return exc
    return None


async def run_output_redirector(
    channel: DeviceChannel,
    console: Console,
    state: SessionState,
) -> FatalIOError | None:
    """Echo device bytes to the console until cancelled.

    A device failure also terminates the session so the input path unwinds.
    """
    logger.info("output redirector starting on %s", state.port_name)
    while not state.terminated:
        try:
            data = await channel.read()
        except ReadCancelledError:
            logger.debug("output redirector cancelled")
            return None
        except FatalIOError as exc:
            logger.error("output redirector stopped: %s", exc)
            state.terminate()
            return exc

        if not data or state.paused:
            continue
        try:
            console.write(data)
        except OSError as exc:
            logger.error("console output failed: %s", exc)
            state.terminate()
            return FatalIOError(f"console output failed: {exc}")
    return None
