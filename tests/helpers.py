"""Test helpers standing in for a live kitty."""

from __future__ import annotations

import typing as t

from kitty_harness import exc


class FakeChannel:
    """In-memory control channel recording what a session sends.

    ``screens`` are returned by successive captures; the last one repeats.
    """

    def __init__(
        self,
        screens: t.Sequence[str] = ("",),
        window_ids: t.Sequence[int] = (1,),
    ) -> None:
        self.socket_addr = "unix:/tmp/kitty-test-fake.sock"
        self.screens = list(screens)
        self.window_id_list = list(window_ids)
        self.sent: list[tuple[int, bytes]] = []
        self.closed: list[int] = []
        self.resized: list[tuple[int, int]] = []
        self.captures = 0
        self.fail_ls = False
        self.fail_close = False
        self.fail_wait = False

    def _fail(self, *cmd: str) -> t.NoReturn:
        raise exc.ControlCommandFailed(["kitty", "@", *cmd], 1, ["connection refused"])

    def list_window_ids(self) -> list[int]:
        if self.fail_ls:
            self._fail("ls")
        return list(self.window_id_list)

    def wait_for_window(self) -> int:
        if self.fail_wait:
            msg = f"window not found on {self.socket_addr}"
            raise exc.LaunchError(msg)
        return self.window_id_list[0]

    def send_text(self, window_id: int, data: bytes) -> None:
        self.sent.append((window_id, data))

    def get_text(self, window_id: int) -> str:
        screen = self.screens[min(self.captures, len(self.screens) - 1)]
        self.captures += 1
        return screen

    def close_window(self, window_id: int) -> None:
        self.closed.append(window_id)
        if self.fail_close:
            self._fail("close-window")

    def resize_os_window(self, cols: int, rows: int) -> None:
        self.resized.append((cols, rows))

    @property
    def sent_bytes(self) -> bytes:
        """Everything sent so far, concatenated."""
        return b"".join(data for _, data in self.sent)
