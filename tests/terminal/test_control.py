"""Tests for in-band control sequence detection."""

from __future__ import annotations

import pytest

from simplecom.shared.enums import ControlCommand
from simplecom.terminal.control import F1_SEQUENCE, F8_SEQUENCE, classify, mask_payload


class TestClassify:
    def test_f1_requests_exit(self) -> None:
        assert classify(b"\x1bOP") is ControlCommand.EXIT

    def test_f8_toggles_pause(self) -> None:
        assert classify(b"\x1b[19~") is ControlCommand.TOGGLE_PAUSE

    def test_accepts_text_units(self) -> None:
        assert classify("\x1bOP") is ControlCommand.EXIT
        assert classify("\x1b[19~") is ControlCommand.TOGGLE_PAUSE

    @pytest.mark.parametrize(
        "chunk",
        [
            b"",
            b"\x1b",
            b"AT\r\n",
            b"\x1bO",
            b"\x1bOPx",
            b"x\x1bOP",
            b"\x1b[19",
            b"\x1b[19~~",
            b"\x1bOQ",
            b"\x1b[20~",
            b"\x1b[A",
            b"OP",
        ],
    )
    def test_everything_else_is_payload(self, chunk: bytes) -> None:
        assert classify(chunk) is ControlCommand.NONE

    def test_sequences_are_distinct(self) -> None:
        assert F1_SEQUENCE != F8_SEQUENCE
        assert classify(F1_SEQUENCE + F8_SEQUENCE) is ControlCommand.NONE


class TestMaskPayload:
    def test_bytes_pass_through(self) -> None:
        assert mask_payload(b"AT\r\n") == b"AT\r\n"

    def test_wide_units_keep_low_byte(self) -> None:
        assert mask_payload("Ałあ") == bytes([0x41, 0x42, 0x42])

    def test_empty(self) -> None:
        assert mask_payload(b"") == b""
