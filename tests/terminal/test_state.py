"""Tests for shared session flags."""

from __future__ import annotations

import threading

from simplecom.terminal.state import SessionState


class TestSessionState:
    def test_defaults(self) -> None:
        state = SessionState(port_name="COM3")
        assert state.port_name == "COM3"
        assert state.terminated is False
        assert state.paused is False

    def test_terminate_is_sticky(self) -> None:
        state = SessionState(port_name="COM3")
        state.terminate()
        state.terminate()
        assert state.terminated is True

    def test_toggle_twice_restores(self) -> None:
        state = SessionState(port_name="COM3")
        assert state.toggle_pause() is True
        assert state.paused is True
        assert state.toggle_pause() is False
        assert state.paused is False

    def test_terminate_visible_across_threads(self) -> None:
        state = SessionState(port_name="COM3")
        seen: list[bool] = []
        worker = threading.Thread(target=lambda: seen.append(state._terminated.wait(timeout=2)))
        worker.start()
        state.terminate()
        worker.join(timeout=2)
        assert seen == [True]
