"""Pytest configuration and shared fixtures."""

import pytest

from tortui.keybindings import KeyBindings


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Reset logging state before each test."""
    from tortui.logging import reset_logging

    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def make_bindings():
    """Build a bindings table from a raw configuration section."""

    def _make(raw: dict) -> KeyBindings:
        return KeyBindings.from_config(raw)

    return _make
