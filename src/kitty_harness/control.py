"""Remote control of a running kitty instance.

kitty_harness.control
~~~~~~~~~~~~~~~~~~~~~

:class:`ControlChannel` issues ``kitty @`` commands against one listening
socket and turns their output into Python values. Commands are run one at a
time and awaited before the next one is sent.
"""

from __future__ import annotations

import json
import logging
import time
import typing as t

from kitty_harness import exc
from kitty_harness.common import kitty_cmd
from kitty_harness.constants import (
    SEND_TEXT_DELAY_SECONDS,
    WINDOW_WAIT_INTERVAL_SECONDS,
    WINDOW_WAIT_RETRIES,
)

if t.TYPE_CHECKING:
    from kitty_harness._internal.types import StrPath

logger = logging.getLogger(__name__)


class ControlProtocol(t.Protocol):
    """What a :class:`~kitty_harness.session.Session` needs from a channel."""

    socket_addr: str

    def list_window_ids(self) -> list[int]: ...

    def wait_for_window(self) -> int: ...

    def send_text(self, window_id: int, data: bytes) -> None: ...

    def get_text(self, window_id: int) -> str: ...

    def close_window(self, window_id: int) -> None: ...

    def resize_os_window(self, cols: int, rows: int) -> None: ...


def window_ids_from_ls(ls: list[dict[str, t.Any]]) -> list[int]:
    """Flatten ``kitty @ ls`` output into window ids.

    Examples
    --------
    >>> window_ids_from_ls([{"tabs": [{"windows": [{"id": 1}, {"id": 4}]}]}])
    [1, 4]
    >>> window_ids_from_ls([])
    []
    """
    return [
        int(window["id"])
        for os_window in ls
        for tab in os_window.get("tabs", [])
        for window in tab.get("windows", [])
    ]


class ControlChannel:
    """Send ``kitty @`` commands to the instance listening on ``socket_addr``.

    Parameters
    ----------
    socket_addr : str
        Address passed to ``--to``, e.g. ``unix:/tmp/kitty-test-1-0.sock``.
    kitty_bin : str | PathLike, optional
        kitty binary to run, defaults to ``kitty`` on ``PATH``.

    Examples
    --------
    >>> channel = ControlChannel("unix:/tmp/kitty-test.sock")
    >>> channel.socket_addr
    'unix:/tmp/kitty-test.sock'
    """

    def __init__(
        self,
        socket_addr: str,
        kitty_bin: StrPath | None = None,
    ) -> None:
        self.socket_addr = socket_addr
        self.kitty_bin = kitty_bin

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.socket_addr!r})"

    def cmd(self, cmd: str, *args: t.Any, input: bytes | None = None) -> kitty_cmd:
        """Run ``kitty @ --to <socket> <cmd> <args>`` and check its status.

        Raises
        ------
        :exc:`exc.ControlCommandFailed`
            If kitty exits with a non-zero status.
        """
        try:
            proc = kitty_cmd(
                "@",
                "--to",
                self.socket_addr,
                cmd,
                *args,
                input=input,
                kitty_bin=self.kitty_bin,
            )
        except OSError as e:
            msg = f"Could not run kitty @ {cmd}: {e}"
            raise exc.ControlError(msg) from e
        if proc.returncode != 0:
            raise exc.ControlCommandFailed(proc.cmd, proc.returncode, proc.stderr)
        return proc

    def list_windows(self) -> list[dict[str, t.Any]]:
        """Return the parsed JSON of ``kitty @ ls``."""
        proc = self.cmd("ls")
        try:
            data = json.loads(proc.stdout_raw)
        except ValueError as e:
            msg = f"kitty @ ls returned invalid JSON: {proc.stdout_raw[:200]!r}"
            raise exc.ControlError(msg) from e
        if not isinstance(data, list):
            msg = f"kitty @ ls returned {type(data).__name__}, expected a list"
            raise exc.ControlError(msg)
        return data

    def list_window_ids(self) -> list[int]:
        """Return the id of every window known to this kitty instance."""
        return window_ids_from_ls(self.list_windows())

    def wait_for_window(
        self,
        retries: int = WINDOW_WAIT_RETRIES,
        interval: float = WINDOW_WAIT_INTERVAL_SECONDS,
    ) -> int:
        """Poll ``ls`` until the first window appears and return its id.

        Raises
        ------
        :exc:`exc.LaunchError`
            If remote control never answers with a window.
        """
        last_error: Exception | None = None
        for _ in range(retries):
            try:
                window_ids = self.list_window_ids()
            except exc.ControlError as e:
                last_error = e
            else:
                if window_ids:
                    return window_ids[0]
            time.sleep(interval)
        msg = (
            f"kitty remote control not reachable or window not found on "
            f"{self.socket_addr} after {retries} attempts"
        )
        if last_error is not None:
            msg += f": {last_error}"
        raise exc.LaunchError(msg)

    def send_text(self, window_id: int, data: bytes) -> None:
        """Deliver ``data`` verbatim as keyboard input to ``window_id``.

        The bytes go through stdin so kitty does not apply its escape
        processing to them.
        """
        self.cmd("send-text", "--match", f"id:{window_id}", "--stdin", input=data)
        time.sleep(SEND_TEXT_DELAY_SECONDS)

    def get_text(self, window_id: int) -> str:
        """Return the visible screen of ``window_id`` with escape sequences."""
        proc = self.cmd(
            "get-text",
            "--match",
            f"id:{window_id}",
            "--ansi",
            "--extent",
            "screen",
        )
        return proc.stdout_raw

    def close_window(self, window_id: int) -> None:
        """Close ``window_id``."""
        self.cmd("close-window", "--match", f"id:{window_id}")

    def resize_os_window(self, cols: int, rows: int) -> None:
        """Resize the OS window to ``cols`` by ``rows`` cells."""
        self.cmd(
            "resize-os-window",
            "--action",
            "resize",
            "--width",
            cols,
            "--height",
            rows,
            "--unit",
            "cells",
        )
