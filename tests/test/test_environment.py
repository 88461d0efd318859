"""Tests for kitty_harness's test environment checks."""

from __future__ import annotations

import logging
import typing as t

import pytest

from kitty_harness.test.environment import (
    has_display,
    kitty_runs,
    kitty_tests_enabled,
    kitty_unavailable_reason,
    require_kitty,
)

if t.TYPE_CHECKING:
    import pathlib


class EnabledFixture(t.NamedTuple):
    """Test fixture for kitty_tests_enabled()."""

    test_id: str
    environ: dict[str, str]
    expected: bool


ENABLED_FIXTURES: list[EnabledFixture] = [
    EnabledFixture(test_id="unset", environ={}, expected=False),
    EnabledFixture(test_id="empty", environ={"KITTY_TESTS": ""}, expected=False),
    EnabledFixture(test_id="zero", environ={"KITTY_TESTS": "0"}, expected=False),
    EnabledFixture(test_id="false", environ={"KITTY_TESTS": "FALSE"}, expected=False),
    EnabledFixture(test_id="one", environ={"KITTY_TESTS": "1"}, expected=True),
    EnabledFixture(test_id="yes", environ={"KITTY_TESTS": "yes"}, expected=True),
]


@pytest.mark.parametrize(
    list(EnabledFixture._fields),
    ENABLED_FIXTURES,
    ids=[f.test_id for f in ENABLED_FIXTURES],
)
def test_kitty_tests_enabled(
    test_id: str,
    environ: dict[str, str],
    expected: bool,
) -> None:
    """KITTY_TESTS turns live tests on unless empty, 0 or false."""
    assert kitty_tests_enabled(environ) is expected


def test_has_display() -> None:
    """Either X11 or Wayland counts as a display."""
    assert has_display({"DISPLAY": ":0"})
    assert has_display({"WAYLAND_DISPLAY": "wayland-0"})
    assert not has_display({})


def make_kitty(bin_dir: pathlib.Path) -> pathlib.Path:
    """Write a fake kitty answering --version."""
    kitty = bin_dir / "kitty"
    kitty.write_text("#!/usr/bin/env bash\necho 'kitty 0.35.2'\n")
    kitty.chmod(0o755)
    return kitty


def test_kitty_runs(bin_dir: pathlib.Path) -> None:
    """A runnable binary passes, a missing one does not."""
    assert kitty_runs(make_kitty(bin_dir))
    assert not kitty_runs(bin_dir / "missing")


def test_unavailable_reasons(bin_dir: pathlib.Path) -> None:
    """Each missing requirement is named."""
    kitty = make_kitty(bin_dir)
    enabled = {"KITTY_TESTS": "1", "DISPLAY": ":0"}

    assert kitty_unavailable_reason({}, kitty) == (
        "set KITTY_TESTS=1 and run under a GUI session"
    )
    assert kitty_unavailable_reason({"KITTY_TESTS": "1"}, kitty) == (
        "DISPLAY/WAYLAND_DISPLAY not set"
    )
    assert kitty_unavailable_reason(enabled, bin_dir / "missing") == (
        f"{bin_dir / 'missing'} binary not found on PATH"
    )
    assert kitty_unavailable_reason(enabled, kitty) is None


def test_require_kitty(
    bin_dir: pathlib.Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """require_kitty() logs why live tests are skipped."""
    kitty = make_kitty(bin_dir)

    with caplog.at_level(logging.WARNING, logger="kitty_harness.test.environment"):
        assert not require_kitty({}, kitty)
    assert "skipping kitty tests: set KITTY_TESTS=1" in caplog.text

    assert require_kitty({"KITTY_TESTS": "1", "WAYLAND_DISPLAY": "w"}, kitty)
