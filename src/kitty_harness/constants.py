"""Constant variables for kitty_harness."""

from __future__ import annotations

import os

#: Prefix of every session tag, followed by ``<pid>-<counter>``
SESSION_PREFIX = "kitty-test-"

#: Attempts made while waiting for a new kitty window to report over ``ls``
WINDOW_WAIT_RETRIES = int(os.getenv("KITTY_WINDOW_WAIT_RETRIES", 40))

#: Seconds between window discovery attempts
WINDOW_WAIT_INTERVAL_SECONDS = 0.1

#: Seconds to let kitty settle after each ``send-text``
SEND_TEXT_DELAY_SECONDS = 0.02

#: Seconds to let a regular (non-panel) kitty create its socket
SOCKET_SETTLE_SECONDS = 0.3

#: Pause used by :func:`kitty_harness.session.pause_briefly`
PAUSE_BRIEFLY_SECONDS = 0.3

#: Arguments selecting a background panel that never takes focus
PANEL_ARGS: tuple[str, ...] = (
    "+kitten",
    "panel",
    "--focus-policy=not-allowed",
    "--edge=background",
)

#: Shell used to run the session command inside the window
SHELL_ARGS: tuple[str, ...] = ("bash", "--noprofile", "--norc", "-lc")

#: Environment defaults applied to non-panel launches unless already set
X11_FALLBACK_ENV: dict[str, str] = {
    "KITTY_ENABLE_WAYLAND": "0",
    "WINIT_UNIX_BACKEND": "x11",
    "LIBGL_ALWAYS_SOFTWARE": "1",
}

#: Seconds between the parts of a click or drag
MOUSE_EVENT_DELAY_SECONDS = 0.01
