r"""Replay recorded input against a session.

kitty_harness.replay
~~~~~~~~~~~~~~~~~~~~

Recordings are plain text, one event per line::

    # comments take a whole line
    j
    C-x

    mouse:press left 10,5
    mouse:release 10,5
    mouse:drag left 12,5
    mouse:scroll up 3,7
    mouse:move 4,4
    paste:aGVsbG8=
    resize:120x50
    focus:in

Key lines hold a key name, optionally with ``C-``, ``A-`` and ``S-``
prefixes. Paste payloads are base64 and are sent as a bracketed paste.
Consecutive key lines form one :class:`KeyBatch`. A blank line or any
other event ends the batch.

>>> parse_recording("j\nk\n\nfocus:in\n")
[KeyBatch(keys=('j', 'k')), FocusIn()]
"""

from __future__ import annotations

import base64
import binascii
import dataclasses
import logging
import pathlib
import re
import time
import typing as t

from kitty_harness import exc
from kitty_harness.keys import KeyPress, Modifiers, encode
from kitty_harness.mouse import (
    MouseButton,
    ScrollDirection,
    encode_mouse_drag,
    encode_mouse_move,
    encode_mouse_press,
    encode_mouse_release,
    encode_mouse_scroll,
)

if t.TYPE_CHECKING:
    from collections.abc import Iterable

    from kitty_harness._internal.types import StrPath
    from kitty_harness.session import Session

logger = logging.getLogger(__name__)

BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"
FOCUS_IN = "\x1b[I"
FOCUS_OUT = "\x1b[O"

_MODIFIER_PREFIXES = {
    "C-": Modifiers.CTRL,
    "A-": Modifiers.ALT,
    "S-": Modifiers.SHIFT,
}

#: Recording key names that differ from :data:`kitty_harness.keys.NAMED_KEYS`
_KEY_ALIASES = {
    "ret": "enter",
    "bs": "backspace",
    "del": "delete",
    "ins": "insert",
    "space": " ",
}

_COORDS_RE = re.compile(r"^(\d+),(\d+)$")
_RESIZE_RE = re.compile(r"^(\d+)x(\d+)$")


@dataclasses.dataclass(frozen=True)
class KeyBatch:
    """Keys sent together."""

    keys: tuple[str, ...]


@dataclasses.dataclass(frozen=True)
class MousePress:
    button: MouseButton
    col: int
    row: int


@dataclasses.dataclass(frozen=True)
class MouseRelease:
    col: int
    row: int


@dataclasses.dataclass(frozen=True)
class MouseDrag:
    button: MouseButton
    col: int
    row: int


@dataclasses.dataclass(frozen=True)
class MouseScroll:
    direction: ScrollDirection
    col: int
    row: int


@dataclasses.dataclass(frozen=True)
class MouseMove:
    col: int
    row: int


@dataclasses.dataclass(frozen=True)
class Paste:
    """Decoded paste content."""

    content: str


@dataclasses.dataclass(frozen=True)
class Resize:
    cols: int
    rows: int


@dataclasses.dataclass(frozen=True)
class FocusIn:
    pass


@dataclasses.dataclass(frozen=True)
class FocusOut:
    pass


ReplayEvent = t.Union[
    KeyBatch,
    MousePress,
    MouseRelease,
    MouseDrag,
    MouseScroll,
    MouseMove,
    Paste,
    Resize,
    FocusIn,
    FocusOut,
]


def key_press_from_name(name: str) -> KeyPress:
    """Parse recording notation such as ``C-x`` or ``S-backtab``.

    Examples
    --------
    >>> key_press_from_name("C-A-x").modifiers == Modifiers.CTRL | Modifiers.ALT
    True
    >>> key_press_from_name("F5").key
    'f5'
    """
    remaining = name
    mods = Modifiers.NONE
    while len(remaining) > 2 and remaining[:2] in _MODIFIER_PREFIXES:
        mods |= _MODIFIER_PREFIXES[remaining[:2]]
        remaining = remaining[2:]

    if remaining == "backtab":
        return KeyPress("tab", mods | Modifiers.SHIFT)
    if len(remaining) > 1:
        remaining = remaining.lower()
    return KeyPress(_KEY_ALIASES.get(remaining, remaining), mods)


def encode_key_name(name: str) -> bytes:
    r"""Encode a key written in recording notation.

    Raises
    ------
    :exc:`exc.EncodingError`
        If the key is unknown or cannot be encoded.

    Examples
    --------
    >>> encode_key_name("C-x")
    b'\x18'
    >>> encode_key_name("esc")
    b'\x1b'
    """
    return encode(key_press_from_name(name))


def _parse_coords(text: str) -> tuple[int, int]:
    # trailing modifier annotations after the coordinates are ignored
    coords = text.split(" ", 1)[0]
    match = _COORDS_RE.match(coords)
    if match is None:
        msg = f"expected col,row, got {coords!r}"
        raise ValueError(msg)
    return int(match.group(1)), int(match.group(2))


def _parse_mouse(rest: str) -> ReplayEvent:
    kind, _, args = rest.partition(" ")
    if kind in ("press", "drag", "scroll"):
        which, _, coords = args.partition(" ")
        col, row = _parse_coords(coords)
        if kind == "scroll":
            return MouseScroll(ScrollDirection[which.upper()], col, row)
        button = MouseButton[which.upper()]
        if kind == "press":
            return MousePress(button, col, row)
        return MouseDrag(button, col, row)
    if kind == "release":
        return MouseRelease(*_parse_coords(args))
    if kind == "move":
        return MouseMove(*_parse_coords(args))
    msg = f"unknown mouse event {kind!r}"
    raise ValueError(msg)


def _parse_paste(rest: str) -> Paste:
    try:
        return Paste(base64.b64decode(rest, validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError) as e:
        msg = f"invalid paste payload: {e}"
        raise ValueError(msg) from e


def _parse_resize(rest: str) -> Resize:
    match = _RESIZE_RE.match(rest)
    if match is None:
        msg = f"expected COLSxROWS, got {rest!r}"
        raise ValueError(msg)
    return Resize(int(match.group(1)), int(match.group(2)))


def _parse_focus(rest: str) -> ReplayEvent:
    if rest == "in":
        return FocusIn()
    if rest == "out":
        return FocusOut()
    msg = f"unknown focus event {rest!r}"
    raise ValueError(msg)


_EVENT_PARSERS: dict[str, t.Callable[[str], ReplayEvent]] = {
    "mouse:": _parse_mouse,
    "paste:": _parse_paste,
    "resize:": _parse_resize,
    "focus:": _parse_focus,
}


def parse_recording(text: str, *, strict: bool = False) -> list[ReplayEvent]:
    """Parse a recording into events.

    Parameters
    ----------
    text : str
        Recording contents.
    strict : bool, optional
        Raise on malformed event lines and on key names that cannot be
        encoded. By default such lines are logged and skipped.

    Raises
    ------
    :exc:`exc.ReplayParseError`
        In strict mode, for the first bad line.
    """
    events: list[ReplayEvent] = []
    batch: list[str] = []

    def flush() -> None:
        if batch:
            events.append(KeyBatch(tuple(batch)))
            batch.clear()

    for line_number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if stripped.startswith("#"):
            continue
        if not stripped:
            flush()
            continue

        prefix = next((p for p in _EVENT_PARSERS if stripped.startswith(p)), None)
        if prefix is None:
            if strict:
                try:
                    encode_key_name(stripped)
                except exc.EncodingError as e:
                    raise exc.ReplayParseError(line_number, line, str(e)) from e
            batch.append(stripped)
            continue

        flush()
        try:
            events.append(_EVENT_PARSERS[prefix](stripped[len(prefix) :]))
        except (KeyError, ValueError) as e:
            if strict:
                raise exc.ReplayParseError(line_number, line, str(e)) from e
            logger.debug("skipping line %d %r: %s", line_number, line, e)

    flush()
    return events


def load_recording(path: StrPath, *, strict: bool = False) -> list[ReplayEvent]:
    """Read and parse the recording at ``path``."""
    return parse_recording(
        pathlib.Path(path).read_text(encoding="utf-8"),
        strict=strict,
    )


@dataclasses.dataclass(frozen=True)
class ReplayTiming:
    """Pacing of a replay.

    Attributes
    ----------
    batch_pause : float
        Seconds to wait after each key batch.
    key_delay : float
        Seconds between keys of a batch. Zero sends each batch in a single
        ``send-text``.
    """

    batch_pause: float
    key_delay: float = 0.0

    @classmethod
    def batched(cls, batch_pause: float) -> ReplayTiming:
        """Send each batch at once, pausing ``batch_pause`` after it."""
        return cls(batch_pause=batch_pause, key_delay=0.0)

    @classmethod
    def per_key(cls, key_delay: float) -> ReplayTiming:
        """Send keys one at a time, ``key_delay`` apart."""
        return cls(batch_pause=key_delay, key_delay=key_delay)


def _encode_batch(keys: Iterable[str]) -> list[bytes]:
    encoded = []
    for name in keys:
        try:
            encoded.append(encode_key_name(name))
        except exc.EncodingError as e:
            logger.warning("skipping key %r: %s", name, e)
    return encoded


def replay(
    session: Session,
    events: Iterable[ReplayEvent],
    timing: ReplayTiming,
) -> None:
    """Send ``events`` to ``session`` in order."""
    for event in events:
        if isinstance(event, KeyBatch):
            encoded = _encode_batch(event.keys)
            if timing.key_delay:
                for data in encoded:
                    session.send_encoded(data)
                    time.sleep(timing.key_delay)
            elif encoded:
                session.send_encoded(b"".join(encoded))
            time.sleep(timing.batch_pause)
        elif isinstance(event, MousePress):
            session.send_text(encode_mouse_press(event.button, event.col, event.row))
        elif isinstance(event, MouseRelease):
            # SGR release reports ignore the button code
            session.send_text(
                encode_mouse_release(MouseButton.LEFT, event.col, event.row),
            )
        elif isinstance(event, MouseDrag):
            session.send_text(encode_mouse_drag(event.button, event.col, event.row))
        elif isinstance(event, MouseScroll):
            session.send_text(
                encode_mouse_scroll(event.direction, event.col, event.row),
            )
        elif isinstance(event, MouseMove):
            session.send_text(encode_mouse_move(event.col, event.row))
        elif isinstance(event, Paste):
            session.send_text(
                f"{BRACKETED_PASTE_START}{event.content}{BRACKETED_PASTE_END}",
            )
        elif isinstance(event, Resize):
            session.resize(event.cols, event.rows)
        elif isinstance(event, FocusIn):
            session.send_text(FOCUS_IN)
        elif isinstance(event, FocusOut):
            session.send_text(FOCUS_OUT)
