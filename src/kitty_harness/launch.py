"""Spawning kitty windows for a session.

kitty_harness.launch
~~~~~~~~~~~~~~~~~~~~

"""

from __future__ import annotations

import logging
import os
import pathlib
import subprocess
import time
import typing as t

from kitty_harness import exc
from kitty_harness.common import which_kitty
from kitty_harness.constants import (
    PANEL_ARGS,
    SHELL_ARGS,
    SOCKET_SETTLE_SECONDS,
    X11_FALLBACK_ENV,
)

if t.TYPE_CHECKING:
    from collections.abc import Mapping

    from kitty_harness._internal.types import StrPath

logger = logging.getLogger(__name__)


def should_use_panel(environ: Mapping[str, str] | None = None) -> bool:
    """Return True if a background panel should be used instead of a window.

    Panels need Wayland with layer-shell support. ``KITTY_TEST_USE_PANEL``
    forces the choice (``1``/``true`` or anything else); otherwise panels
    are used only on a native Wayland session outside WSL.

    Examples
    --------
    >>> should_use_panel({"KITTY_TEST_USE_PANEL": "true"})
    True
    >>> should_use_panel({"WAYLAND_DISPLAY": "wayland-0", "WSL_DISTRO_NAME": "x"})
    False
    >>> should_use_panel(
    ...     {"WAYLAND_DISPLAY": "wayland-0", "XDG_SESSION_TYPE": "wayland"}
    ... )
    True
    """
    if environ is None:
        environ = os.environ

    override = environ.get("KITTY_TEST_USE_PANEL")
    if override is not None:
        return override == "1" or override.lower() == "true"

    # WSL exports WAYLAND_DISPLAY but usually lacks layer-shell
    if "WSL_DISTRO_NAME" in environ or "WSL_INTEROP" in environ:
        return False

    if "WAYLAND_DISPLAY" in environ:
        return environ.get("XDG_SESSION_TYPE") == "wayland"

    return False


def socket_path(working_dir: StrPath, session_name: str) -> pathlib.Path:
    """Return the control socket path for ``session_name``."""
    return pathlib.Path(working_dir) / f"{session_name}.sock"


def launch_args(
    session_name: str,
    socket_addr: str,
    command: str,
    *,
    use_panel: bool,
) -> list[str]:
    """Return the kitty arguments that run ``command`` in a new window.

    Examples
    --------
    >>> launch_args("kitty-test-1-0", "unix:/tmp/s.sock", "htop", use_panel=False)
    ['--listen-on', 'unix:/tmp/s.sock', '--class', 'kitty-test-1-0', '-o', \
'allow_remote_control=yes', '--detach', 'bash', '--noprofile', '--norc', '-lc', 'htop']
    """
    args = list(PANEL_ARGS) if use_panel else []
    args += [
        "--listen-on",
        socket_addr,
        "--class",
        session_name,
        "-o",
        "allow_remote_control=yes",
        "--detach",
        *SHELL_ARGS,
        command,
    ]
    return args


def launch_env(
    socket_addr: str,
    *,
    use_panel: bool,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return the environment for the kitty process.

    The launched program learns the socket through ``KITTY_LISTEN_ON`` so
    it can talk back to its own window. Everything else, such as
    ``KITTY_REMOTE_BIN`` pointing at a mock, is inherited from ``environ``.
    """
    env = dict(os.environ if environ is None else environ)
    if not use_panel:
        for key, value in X11_FALLBACK_ENV.items():
            env.setdefault(key, value)
    env["KITTY_LISTEN_ON"] = socket_addr
    return env


def spawn_kitty(
    working_dir: StrPath,
    session_name: str,
    socket_addr: str,
    command: str,
    *,
    kitty_bin: StrPath | None = None,
    use_panel: bool | None = None,
) -> None:
    """Start a detached kitty window or panel for a session.

    Raises
    ------
    :exc:`exc.KittyCommandNotFound`
        If kitty is not on ``PATH``.
    :exc:`exc.LaunchError`
        If the process cannot be started or exits with an error.
    """
    if use_panel is None:
        use_panel = should_use_panel()

    cmd = [which_kitty(kitty_bin), *launch_args(
        session_name,
        socket_addr,
        command,
        use_panel=use_panel,
    )]
    logger.debug(
        "launching %s in %s: %s",
        "panel" if use_panel else "window",
        working_dir,
        subprocess.list2cmdline(cmd),
    )

    try:
        proc = subprocess.run(
            cmd,
            cwd=working_dir,
            env=launch_env(socket_addr, use_panel=use_panel),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=False,
        )
    except OSError as e:
        msg = f"Could not start kitty for {session_name}: {e}"
        raise exc.LaunchError(msg) from e

    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="backslashreplace").strip()
        msg = f"kitty exited with status {proc.returncode} for {session_name}"
        if stderr:
            msg += f": {stderr}"
        raise exc.LaunchError(msg)

    if not use_panel:
        # a regular window needs a moment before the socket accepts commands
        time.sleep(SOCKET_SETTLE_SECONDS)
