"""kitty_harness, drive kitty terminal windows for integration tests."""

from .__about__ import (
    __author__,
    __copyright__,
    __description__,
    __email__,
    __license__,
    __package_name__,
    __title__,
    __version__,
)
from .control import ControlChannel
from .keys import KeyPress, Modifiers, encode, encode_sequence, send_keys
from .screen import CapturedScreen, strip_ansi
from .session import Session, kitty_session, launch, with_kitty_capture

__all__ = (
    "CapturedScreen",
    "ControlChannel",
    "KeyPress",
    "Modifiers",
    "Session",
    "__author__",
    "__copyright__",
    "__description__",
    "__email__",
    "__license__",
    "__package_name__",
    "__title__",
    "__version__",
    "encode",
    "encode_sequence",
    "kitty_session",
    "launch",
    "send_keys",
    "strip_ansi",
    "with_kitty_capture",
)
