"""Tests for error reporters and the exit confirmation prompt."""

from __future__ import annotations

import io
import logging

import pytest
from fakes import FakeConsole

from simplecom.terminal.reporter import (
    EXIT_PROMPT,
    ConsolePrompt,
    ConsoleReporter,
    LogReporter,
    select_reporter,
)


class TestReporters:
    def test_console_reporter_prints_caption(self) -> None:
        stream = io.StringIO()

        ConsoleReporter(stream).error("Open serial COM3 failed: busy", caption="Open serial connection")

        assert stream.getvalue() == "Open serial connection: Open serial COM3 failed: busy\n"

    def test_console_reporter_without_caption(self) -> None:
        stream = io.StringIO()

        ConsoleReporter(stream).error("boom")

        assert stream.getvalue() == "boom\n"

    def test_log_reporter(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="simplecom.terminal.reporter"):
            LogReporter().error("device removed", caption="SimpleCom")

        assert "SimpleCom: device removed" in caplog.text

    def test_select_reporter(self) -> None:
        assert isinstance(select_reporter(True), ConsoleReporter)
        assert isinstance(select_reporter(False), LogReporter)


class TestConsolePrompt:
    @pytest.mark.parametrize(("answer", "expected"), [(b"y", True), (b"Y", True), (b"n", False), (b"\r", False)])
    async def test_answer(self, console: FakeConsole, answer: bytes, expected: bool) -> None:
        console.type(answer)

        assert await ConsolePrompt(console)() is expected
        assert EXIT_PROMPT.encode() in bytes(console.output)

    async def test_only_first_key_counts(self, console: FakeConsole) -> None:
        console.type(b"no")

        assert await ConsolePrompt(console)() is False
