"""Tests for kitty_harness's test constants."""

from __future__ import annotations

from importlib import reload
from typing import TYPE_CHECKING

from kitty_harness.test.constants import (
    KITTY_TESTS_ENV,
    READY_MARKER_TIMEOUT_SECONDS,
    RETRY_INTERVAL_SECONDS,
    RETRY_TIMEOUT_SECONDS,
)

if TYPE_CHECKING:
    import pytest


def test_retry_timeout_seconds_default() -> None:
    """Test RETRY_TIMEOUT_SECONDS default value."""
    assert RETRY_TIMEOUT_SECONDS == 8


def test_retry_timeout_seconds_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test RETRY_TIMEOUT_SECONDS can be configured via environment variable."""
    import kitty_harness.test.constants

    monkeypatch.setenv("RETRY_TIMEOUT_SECONDS", "2.5")
    reload(kitty_harness.test.constants)
    assert kitty_harness.test.constants.RETRY_TIMEOUT_SECONDS == 2.5

    monkeypatch.delenv("RETRY_TIMEOUT_SECONDS")
    reload(kitty_harness.test.constants)


def test_retry_interval_seconds_default() -> None:
    """Test RETRY_INTERVAL_SECONDS default value."""
    assert RETRY_INTERVAL_SECONDS == 0.05


def test_live_test_settings() -> None:
    """Live tests are gated by KITTY_TESTS and wait 5s for readiness."""
    assert KITTY_TESTS_ENV == "KITTY_TESTS"
    assert READY_MARKER_TIMEOUT_SECONDS == 5.0
