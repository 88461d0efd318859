"""Key event encoding.

kitty_harness.keys
~~~~~~~~~~~~~~~~~~

Logical key presses are turned into the bytes a terminal would receive by
looking them up in prompt_toolkit's VT100 key table rather than keeping
escape sequence literals here.

Terminal key encoding quirks
----------------------------

Ctrl+Enter vs Ctrl+J
    Most terminals and the TTY layer deliver ``Ctrl+Enter`` as ``Ctrl+J``
    (``0x0a``, line feed). Encoding ``Enter`` with :attr:`Modifiers.CTRL`
    raises :exc:`~kitty_harness.exc.EncodingError`; send :data:`CTRL_J`
    instead.

Alt/Meta
    Alt is encoded as an ESC prefix followed by the unmodified key, which
    every terminal understands. :func:`send_alt_key` is a shortcut.

Control characters
    ``Ctrl+A`` .. ``Ctrl+Z`` are ``0x01`` .. ``0x1a``, ``Ctrl+[`` is ESC,
    ``Ctrl+M`` is carriage return (same as Enter).

Backspace, Home and End
    Backspace is DEL (``0x7f``) and ``Ctrl+Backspace`` is ``0x08``. Home
    and End are ``ESC [ H`` and ``ESC [ F``. prompt_toolkit lists other
    forms first for these keys, so kitty's bytes are kept in a small
    override map.

Examples
--------
>>> encode(KeyPress("c", Modifiers.CTRL))
b'\\x03'
>>> encode_sequence([KeyPress("l"), KeyPress("s"), ENTER])
b'ls\\r'
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import typing as t

from prompt_toolkit.input.ansi_escape_sequences import ANSI_SEQUENCES
from prompt_toolkit.keys import Keys

from kitty_harness import exc

if t.TYPE_CHECKING:
    from collections.abc import Iterable

    from kitty_harness.session import Session

logger = logging.getLogger(__name__)


def _reverse_sequences() -> dict[Keys, str]:
    """Map each key to the first sequence prompt_toolkit lists for it.

    Linux console forms (``ESC [ [``) are skipped, they would win for F5.
    """
    result: dict[Keys, str] = {}
    for sequence, key in ANSI_SEQUENCES.items():
        if isinstance(key, tuple) or sequence.startswith("\x1b[["):
            continue
        result.setdefault(key, sequence)
    return result


_SEQUENCES = _reverse_sequences()


class Modifiers(enum.Flag):
    """Modifier keys held while a key is pressed."""

    NONE = 0
    SHIFT = enum.auto()
    ALT = enum.auto()
    CTRL = enum.auto()


#: Keys kitty's legacy encoding sends differently from the table's first entry
_KITTY_OVERRIDES: dict[tuple[str, Modifiers], bytes] = {
    ("backspace", Modifiers.NONE): b"\x7f",
    ("backspace", Modifiers.CTRL): b"\x08",
    ("home", Modifiers.NONE): b"\x1b[H",
    ("end", Modifiers.NONE): b"\x1b[F",
}


#: Key names accepted by :class:`KeyPress` besides single characters
NAMED_KEYS: dict[str, Keys] = {
    "escape": Keys.Escape,
    "esc": Keys.Escape,
    "enter": Keys.Enter,
    "tab": Keys.Tab,
    "backspace": Keys.Backspace,
    "up": Keys.Up,
    "down": Keys.Down,
    "left": Keys.Left,
    "right": Keys.Right,
    "home": Keys.Home,
    "end": Keys.End,
    "insert": Keys.Insert,
    "delete": Keys.Delete,
    "pageup": Keys.PageUp,
    "pagedown": Keys.PageDown,
    **{f"f{n}": Keys(f"f{n}") for n in range(1, 25)},
}

#: Named keys whose table entries have ``c-``, ``s-`` and ``c-s-`` variants
_MODIFIABLE_KEYS = frozenset(
    {
        "up",
        "down",
        "left",
        "right",
        "home",
        "end",
        "insert",
        "delete",
        "pageup",
        "pagedown",
    },
)


@dataclasses.dataclass(frozen=True)
class KeyPress:
    """A key plus the modifiers held while pressing it.

    Parameters
    ----------
    key : str
        A single character (``"a"``, ``"/"``, ``" "``) or a name from
        :data:`NAMED_KEYS`, e.g. ``"enter"`` or ``"f5"``.
    modifiers : Modifiers
        Held modifiers, combined with ``|``.
    """

    key: str
    modifiers: Modifiers = Modifiers.NONE

    def __post_init__(self) -> None:
        if not self.key:
            raise exc.EncodingError(self.key, self.modifiers, "empty key")

    @classmethod
    def coerce(cls, value: KeyPress | str | tuple[str, Modifiers]) -> KeyPress:
        """Build a :class:`KeyPress` from a key name or ``(key, modifiers)``."""
        if isinstance(value, KeyPress):
            return value
        if isinstance(value, tuple):
            return cls(*value)
        return cls(value)


#: Ctrl+J, the reliable stand-in for Ctrl+Enter
CTRL_J = KeyPress("j", Modifiers.CTRL)
#: Ctrl+M, carriage return
CTRL_M = KeyPress("m", Modifiers.CTRL)
#: Ctrl+C, interrupt
CTRL_C = KeyPress("c", Modifiers.CTRL)
#: Ctrl+D, EOF
CTRL_D = KeyPress("d", Modifiers.CTRL)
#: Ctrl+Z, suspend
CTRL_Z = KeyPress("z", Modifiers.CTRL)
ESCAPE = KeyPress("escape")
ENTER = KeyPress("enter")
TAB = KeyPress("tab")
SHIFT_TAB = KeyPress("tab", Modifiers.SHIFT)


def _table_key(key: str, mods: Modifiers) -> Keys | None:
    """Map ``key`` and non-Alt ``mods`` onto a prompt_toolkit key."""
    ctrl = Modifiers.CTRL in mods
    shift = Modifiers.SHIFT in mods
    name = key.lower() if len(key) > 1 else key

    if name in _MODIFIABLE_KEYS:
        prefix = ("c-" if ctrl else "") + ("s-" if shift else "")
        return Keys(prefix + name)
    if name == "tab" and shift and not ctrl:
        return Keys.BackTab
    if name.startswith("f") and name in NAMED_KEYS and ctrl and not shift:
        return Keys("c-" + name)
    if name in NAMED_KEYS:
        return NAMED_KEYS[name] if not (ctrl or shift) else None
    if len(key) != 1:
        return None
    if ctrl:
        if shift:
            return None
        if key == " ":
            return Keys.ControlSpace
        try:
            return Keys("c-" + key.lower())
        except ValueError:
            return None
    return None


def encode(press: KeyPress | str | tuple[str, Modifiers]) -> bytes:
    r"""Encode one key press as the bytes a terminal sends for it.

    Raises
    ------
    :exc:`exc.EncodingError`
        If the key or the key and modifier combination has no encoding.

    Examples
    --------
    >>> encode("a")
    b'a'
    >>> encode(("a", Modifiers.SHIFT))
    b'A'
    >>> encode(("x", Modifiers.ALT))
    b'\x1bx'
    >>> encode("up")
    b'\x1b[A'
    >>> encode(SHIFT_TAB)
    b'\x1b[Z'
    """
    press = KeyPress.coerce(press)
    key, mods = press.key, press.modifiers

    if Modifiers.ALT in mods:
        return b"\x1b" + encode(KeyPress(key, mods & ~Modifiers.ALT))

    if key.lower() == "enter" and Modifiers.CTRL in mods:
        raise exc.EncodingError(
            key,
            mods,
            "terminals deliver Ctrl+Enter as Ctrl+J, send keys.CTRL_J instead",
        )

    if len(key) == 1 and mods in (Modifiers.NONE, Modifiers.SHIFT) and key.isprintable():
        text = key.upper() if Modifiers.SHIFT in mods else key
        return text.encode("utf-8")

    override = _KITTY_OVERRIDES.get((key.lower(), mods))
    if override is not None:
        return override

    try:
        table_key = _table_key(key, mods)
    except ValueError:
        table_key = None
    sequence = _SEQUENCES.get(table_key) if table_key else None
    if sequence is None:
        raise exc.EncodingError(key, mods)
    return sequence.encode("utf-8")


def encode_sequence(
    presses: Iterable[KeyPress | str | tuple[str, Modifiers]],
) -> bytes:
    """Encode key presses in order and concatenate the results.

    Examples
    --------
    >>> encode_sequence(["h", "i", CTRL_J])
    b'hi\\n'
    """
    return b"".join(encode(press) for press in presses)


def send_keys(
    session: Session,
    *presses: KeyPress | str | tuple[str, Modifiers],
) -> None:
    """Encode ``presses`` and send them one at a time, in order.

    Every key is encoded before anything is sent, so an unsupported key
    does not leave a half-typed sequence behind.
    """
    encoded = [encode(press) for press in presses]
    for data in encoded:
        session.send_encoded(data)


def type_string(session: Session, text: str) -> None:
    """Type ``text`` one character per ``send-text`` call."""
    for ch in text:
        session.send_text(ch)


def type_and_execute(session: Session, text: str) -> None:
    """Type ``text`` and submit it with :data:`CTRL_J`."""
    type_string(session, text)
    send_keys(session, CTRL_J)


def send_alt_key(session: Session, ch: str) -> None:
    """Send ``ch`` with Alt held, as an ESC prefix."""
    session.send_text(f"\x1b{ch}")


__all__ = [
    "CTRL_C",
    "CTRL_D",
    "CTRL_J",
    "CTRL_M",
    "CTRL_Z",
    "ENTER",
    "ESCAPE",
    "NAMED_KEYS",
    "SHIFT_TAB",
    "TAB",
    "KeyPress",
    "Modifiers",
    "encode",
    "encode_sequence",
    "send_alt_key",
    "send_keys",
    "type_and_execute",
    "type_string",
]
