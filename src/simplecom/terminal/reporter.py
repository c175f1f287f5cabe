"""Operator-facing error reporting and exit confirmation."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from simplecom.terminal.interfaces import Console, Reporter

logger = logging.getLogger(__name__)

EXIT_PROMPT = "Do you want to leave from this serial session?"


class ConsoleReporter:
    """Print errors for an operator sitting at the terminal."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stderr

    def error(self, message: str, *, caption: str = "") -> None:
        text = f"{caption}: {message}" if caption else message
        print(text, file=self._stream, flush=True)


class LogReporter:
    """Route errors to the log when nobody is watching the terminal."""

    def error(self, message: str, *, caption: str = "") -> None:
        if caption:
            logger.error("%s: %s", caption, message)
        else:
            logger.error("%s", message)


def select_reporter(interactive: bool) -> Reporter:
    return ConsoleReporter() if interactive else LogReporter()


class ConsolePrompt:
    """Ask the operator to confirm leaving the session.

    Only the first key typed counts; ``y`` or ``Y`` confirms.
    """

    def __init__(self, console: Console, *, prompt: str = EXIT_PROMPT) -> None:
        self._console = console
        self._prompt = prompt

    async def __call__(self) -> bool:
        self._console.write(f"\r\n{self._prompt} [y/N] ".encode())
        answer = await self._console.read(16)
        self._console.write(b"\r\n")
        confirmed = answer[:1] in (b"y", b"Y")
        logger.debug("exit confirmation answered %r", answer[:1])
        return confirmed
