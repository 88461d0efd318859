r"""Mouse event encoding.

kitty_harness.mouse
~~~~~~~~~~~~~~~~~~~

Mouse events are sent as SGR (mode 1006) reports, the extended mouse
protocol most applications enable: ``ESC [ < button ; col ; row M`` for a
press or motion and the same with a trailing ``m`` for a release.

Coordinates given to this module are 0-based cells and are written 1-based
on the wire.

>>> encode_mouse_press(MouseButton.LEFT, 9, 4)
'\x1b[<0;10;5M'
"""

from __future__ import annotations

import enum
import logging
import time
import typing as t

from kitty_harness.constants import MOUSE_EVENT_DELAY_SECONDS

if t.TYPE_CHECKING:
    from kitty_harness.session import Session

logger = logging.getLogger(__name__)

#: Added to the button code for motion reports
MOTION_FLAG = 32

#: Button code of a motion report with no button held (32 + 3)
NO_BUTTON_MOTION = 35


class MouseButton(enum.IntEnum):
    """SGR button codes."""

    LEFT = 0
    MIDDLE = 1
    RIGHT = 2


class ScrollDirection(enum.IntEnum):
    """SGR codes of wheel events."""

    UP = 64
    DOWN = 65
    LEFT = 66
    RIGHT = 67


def _sgr(code: int, col: int, row: int, final: str = "M") -> str:
    if col < 0 or row < 0:
        msg = f"Mouse coordinates must not be negative: {col},{row}"
        raise ValueError(msg)
    return f"\x1b[<{int(code)};{col + 1};{row + 1}{final}"


def encode_mouse_press(button: MouseButton, col: int, row: int) -> str:
    r"""Encode pressing ``button`` at ``col``, ``row``.

    >>> encode_mouse_press(MouseButton.RIGHT, 5, 5)
    '\x1b[<2;6;6M'
    """
    return _sgr(button, col, row)


def encode_mouse_release(button: MouseButton, col: int, row: int) -> str:
    r"""Encode releasing ``button``; only the trailer differs from a press.

    >>> encode_mouse_release(MouseButton.MIDDLE, 2, 3)
    '\x1b[<1;3;4m'
    """
    return _sgr(button, col, row, "m")


def encode_mouse_drag(button: MouseButton, col: int, row: int) -> str:
    r"""Encode motion to ``col``, ``row`` while ``button`` is held.

    >>> encode_mouse_drag(MouseButton.LEFT, 0, 0)
    '\x1b[<32;1;1M'
    """
    return _sgr(button + MOTION_FLAG, col, row)


def encode_mouse_move(col: int, row: int) -> str:
    r"""Encode motion with no button held.

    >>> encode_mouse_move(0, 0)
    '\x1b[<35;1;1M'
    """
    return _sgr(NO_BUTTON_MOTION, col, row)


def encode_mouse_scroll(direction: ScrollDirection, col: int, row: int) -> str:
    r"""Encode one wheel step at ``col``, ``row``.

    >>> encode_mouse_scroll(ScrollDirection.DOWN, 3, 7)
    '\x1b[<65;4;8M'
    """
    return _sgr(direction, col, row)


def send_mouse_press(session: Session, button: MouseButton, col: int, row: int) -> None:
    """Press ``button`` at ``col``, ``row``."""
    session.send_text(encode_mouse_press(button, col, row))


def send_mouse_release(
    session: Session,
    button: MouseButton,
    col: int,
    row: int,
) -> None:
    """Release ``button`` at ``col``, ``row``."""
    session.send_text(encode_mouse_release(button, col, row))


def send_mouse_click(session: Session, button: MouseButton, col: int, row: int) -> None:
    """Press and release ``button`` at ``col``, ``row``."""
    session.send_text(encode_mouse_press(button, col, row))
    time.sleep(MOUSE_EVENT_DELAY_SECONDS)
    session.send_text(encode_mouse_release(button, col, row))


def send_mouse_move(session: Session, col: int, row: int) -> None:
    """Move the pointer to ``col``, ``row`` with no button held."""
    session.send_text(encode_mouse_move(col, row))


def send_mouse_scroll(
    session: Session,
    direction: ScrollDirection,
    col: int,
    row: int,
    count: int = 1,
) -> None:
    """Scroll ``count`` wheel steps at ``col``, ``row``."""
    for _ in range(count):
        session.send_text(encode_mouse_scroll(direction, col, row))


def send_mouse_drag(
    session: Session,
    button: MouseButton,
    start: tuple[int, int],
    end: tuple[int, int],
) -> None:
    """Drag from ``start`` to ``end`` in one motion report."""
    send_mouse_drag_with_steps(session, button, start, end, steps=1)


def send_mouse_drag_with_steps(
    session: Session,
    button: MouseButton,
    start: tuple[int, int],
    end: tuple[int, int],
    steps: int,
) -> None:
    """Drag from ``start`` to ``end`` through ``steps`` motion reports.

    Intermediate cells are interpolated linearly and truncated, for
    applications that react to the path and not only the end point.
    """
    if steps < 1:
        msg = f"steps must be at least 1, got {steps}"
        raise ValueError(msg)

    start_col, start_row = start
    end_col, end_row = end

    session.send_text(encode_mouse_press(button, start_col, start_row))
    time.sleep(MOUSE_EVENT_DELAY_SECONDS)

    for i in range(1, steps + 1):
        frac = i / steps
        col = int(start_col + (end_col - start_col) * frac)
        row = int(start_row + (end_row - start_row) * frac)
        session.send_text(encode_mouse_drag(button, col, row))
        time.sleep(MOUSE_EVENT_DELAY_SECONDS)

    session.send_text(encode_mouse_release(button, end_col, end_row))
