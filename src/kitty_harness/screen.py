r"""Screen capture normalization.

kitty_harness.screen
~~~~~~~~~~~~~~~~~~~~

Raw captures from ``kitty @ get-text --ansi`` keep every escape sequence.
:func:`strip_ansi` reduces them to the text a person would read, and
:func:`clean_trailing_whitespace` removes the padding kitty adds to the
right and bottom of the screen without touching escape sequences that sit
between visible characters.

>>> strip_ansi("\x1b[1;31mred\x1b[0m plain")
'red plain'
"""

from __future__ import annotations

import dataclasses
import logging
import re

logger = logging.getLogger(__name__)

_ESCAPE_SEQUENCE_RE = re.compile(
    r"""
    (?:\x1b\[|\x9b) [0-?]* [\ -/]* [@-~]          # CSI, 7 and 8 bit
    | (?:\x1b[\]PX^_]|[\x90\x98\x9d-\x9f])         # OSC, DCS, SOS, PM, APC ...
      [^\x07\x1b\x9c\n]* (?:\x07|\x1b\\|\x9c)?      # ... up to BEL or ST
    | \x1b [\ -/]+ [0-~]                           # nF, e.g. charset selection
    | \x1b [0-~]                                   # Fp, Fe, Fs
    """,
    re.VERBOSE,
)

#: C0 and C1 controls other than tab and newline, and DEL
_CONTROL_CHAR_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")

_LINE_TOKEN_RE = re.compile(r"\x1b[^a-zA-Z~]*[a-zA-Z~]?|[^\x1b]+")


def strip_ansi(raw: str) -> str:
    r"""Remove terminal escape and control sequences from ``raw``.

    Cursor movement, colors and styles, and operating system commands are
    removed. Line breaks and whitespace inside lines are kept.

    Examples
    --------
    >>> strip_ansi("\x1b]0;title\x07$ ls")
    '$ ls'
    >>> strip_ansi("a\x1b[2Kb\nc")
    'ab\nc'
    >>> strip_ansi(strip_ansi("\x1b[38:2:1:2:3mx")) == strip_ansi("\x1b[38:2:1:2:3mx")
    True
    """
    text = raw.replace("\r\n", "\n")
    text = _ESCAPE_SEQUENCE_RE.sub("", text)
    return _CONTROL_CHAR_RE.sub("", text)


def _split_tokens(line: str) -> list[tuple[bool, str]]:
    """Split ``line`` into ``(is_escape, chunk)`` pairs."""
    return [
        (match.group(0).startswith("\x1b"), match.group(0))
        for match in _LINE_TOKEN_RE.finditer(line)
    ]


def clean_trailing_whitespace(raw: str) -> str:
    r"""Trim terminal padding from a raw capture, keeping escape sequences.

    Each line loses everything after its last non-blank text chunk,
    including trailing escape sequences. Blank lines at the end are
    dropped.

    Examples
    --------
    >>> clean_trailing_whitespace("\x1b[31mhi\x1b[0m   \x1b[m\n   \n\n")
    '\x1b[31mhi'
    >>> clean_trailing_whitespace("a  \x1b[1mb  \nc")
    'a  \x1b[1mb\nc'
    """
    cleaned_lines = []

    for line in raw.split("\n"):
        tokens = _split_tokens(line)
        keep_until = 0
        for idx, (is_escape, chunk) in enumerate(tokens):
            if not is_escape and chunk.rstrip():
                keep_until = idx + 1
        kept = tokens[:keep_until]
        if kept:
            last_is_escape, last_chunk = kept[-1]
            kept[-1] = (last_is_escape, last_chunk.rstrip())
        cleaned_lines.append("".join(chunk for _, chunk in kept))

    while cleaned_lines and not strip_ansi(cleaned_lines[-1]).strip():
        cleaned_lines.pop()

    return "\n".join(cleaned_lines)


@dataclasses.dataclass(frozen=True)
class CapturedScreen:
    """Immutable result of one screen capture.

    Attributes
    ----------
    raw : str
        Capture as returned by kitty, with escape sequences, trailing
        padding trimmed.
    """

    raw: str

    @property
    def text(self) -> str:
        """Capture with escape sequences removed."""
        return strip_ansi(self.raw)

    @property
    def lines(self) -> list[str]:
        """Stripped capture split on ``\\n``, without a trailing empty line."""
        lines = self.text.split("\n")
        if lines[-1] == "":
            lines.pop()
        return lines

    def __contains__(self, needle: object) -> bool:
        return isinstance(needle, str) and needle in self.text
