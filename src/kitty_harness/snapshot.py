"""Syrupy snapshot extension and pytest hooks for screen captures.

This module provides:

- ScreenSnapshotExtension: A syrupy extension for .screen snapshot files
- pytest_assertrepr_compare: Line diff output for CapturedScreen comparisons
- screen_snapshot: Pre-configured snapshot fixture
- kitty_snapshot: Run a driver against a fresh session and snapshot its result

When kitty-test-harness is installed, pytest discovers this plugin through
the pytest11 entry point.
"""

from __future__ import annotations

import difflib
import typing as t

import pytest
from syrupy.assertion import SnapshotAssertion
from syrupy.extensions.single_file import SingleFileSnapshotExtension, WriteMode

from kitty_harness.screen import CapturedScreen
from kitty_harness.session import with_kitty_capture

if t.TYPE_CHECKING:
    from collections.abc import Callable

    from kitty_harness._internal.types import StrPath
    from kitty_harness.session import Session


class ScreenSnapshotExtension(SingleFileSnapshotExtension):
    """Single-file extension for screen snapshots (.screen files).

    Notes
    -----
    This extension serializes:

    - CapturedScreen objects → their stripped text
    - Other types → str() representation
    """

    _write_mode = WriteMode.TEXT
    file_extension = "screen"

    def serialize(
        self,
        data: t.Any,
        *,
        exclude: t.Any = None,
        include: t.Any = None,
        matcher: t.Any = None,
    ) -> str:
        """Serialize a capture to the text a person would read."""
        if isinstance(data, CapturedScreen):
            return data.text
        return str(data)


def pytest_assertrepr_compare(
    config: pytest.Config,
    op: str,
    left: t.Any,
    right: t.Any,
) -> list[str] | None:
    """Show a line diff of the stripped text when two captures differ."""
    if not isinstance(left, CapturedScreen) or not isinstance(right, CapturedScreen):
        return None
    if op != "==":
        return None

    lines = ["CapturedScreen comparison failed:"]
    if left.text == right.text:
        lines.append("  text is equal, escape sequences differ")
        lines.append("")
        lines.append("Raw diff:")
        lines.extend(
            difflib.ndiff(
                [repr(line) for line in right.raw.split("\n")],
                [repr(line) for line in left.raw.split("\n")],
            ),
        )
        return lines

    lines.append("")
    lines.append("Content diff:")
    lines.extend(difflib.ndiff(right.lines, left.lines))
    return lines


@pytest.fixture
def screen_snapshot(snapshot: SnapshotAssertion) -> SnapshotAssertion:
    """Snapshot fixture configured with ScreenSnapshotExtension.

    Examples
    --------
    >>> def test_prompt(kitty, screen_snapshot):
    ...     session = kitty("printf 'ready\\n'; sleep 30")
    ...     assert session.capture() == screen_snapshot
    """
    return snapshot.use_extension(ScreenSnapshotExtension)


def kitty_snapshot(
    snapshot: SnapshotAssertion,
    working_dir: StrPath,
    command: str,
    driver: Callable[[Session], t.Any],
    **kwargs: t.Any,
) -> None:
    """Launch ``command``, run ``driver`` and assert its result on ``snapshot``.

    The session is closed before the comparison, so a mismatch never
    leaves a window behind.
    """
    result = with_kitty_capture(working_dir, command, driver, **kwargs)
    assert result == snapshot
