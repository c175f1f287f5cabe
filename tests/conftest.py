"""Shared pytest fixtures for the SimpleCom test suite."""

from __future__ import annotations

import pytest
from fakes import FakeChannel, FakeConsole

from simplecom.config import Settings
from simplecom.terminal.state import SessionState


@pytest.fixture()
def settings() -> Settings:
    """Return a Settings instance with test defaults."""
    return Settings(port="COM3", confirm_exit=False, drain_timeout_seconds=0.5)


@pytest.fixture()
def console() -> FakeConsole:
    return FakeConsole()


@pytest.fixture()
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture()
def state() -> SessionState:
    return SessionState(port_name="COM3")
