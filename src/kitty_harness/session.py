"""Pythonization of a kitty test session.

kitty_harness.session
~~~~~~~~~~~~~~~~~~~~~

A :class:`Session` owns one kitty window (or background panel) running a
command under test. It is created unlaunched, becomes live with
:meth:`Session.launch` and is closed exactly once, either explicitly, on
leaving a ``with`` block, or when it is garbage collected.
"""

from __future__ import annotations

import contextlib
import enum
import itertools
import logging
import os
import pathlib
import queue
import threading
import time
import typing as t

from kitty_harness import exc
from kitty_harness.constants import PAUSE_BRIEFLY_SECONDS, SESSION_PREFIX
from kitty_harness.control import ControlChannel
from kitty_harness.launch import socket_path, spawn_kitty
from kitty_harness.screen import CapturedScreen, clean_trailing_whitespace, strip_ansi

if t.TYPE_CHECKING:
    import sys
    import types
    from collections.abc import Callable, Iterator

    from kitty_harness._internal.types import CleanCapture, SampleT, StrPath
    from kitty_harness.control import ControlProtocol

    if sys.version_info >= (3, 11):
        from typing import Self
    else:
        from typing_extensions import Self


logger = logging.getLogger(__name__)

_session_counter = itertools.count()


def next_session_name() -> str:
    """Return a session name unique to this process.

    The name embeds the process id, so concurrent test processes never
    address each other's windows, and a counter, so one process can run
    several sessions.

    Examples
    --------
    >>> next_session_name().startswith(f"kitty-test-{os.getpid()}-")
    True
    >>> next_session_name() != next_session_name()
    True
    """
    return f"{SESSION_PREFIX}{os.getpid()}-{next(_session_counter)}"


class SessionState(enum.Enum):
    """Lifecycle of a :class:`Session`."""

    UNLAUNCHED = "unlaunched"
    LAUNCHED = "launched"
    CLOSED = "closed"


class Session:
    """A kitty window under test.

    Parameters
    ----------
    working_dir : str or :class:`pathlib.Path`
        Starting directory of the window. The control socket is created
        here as well.
    command : str
        Shell command run inside the window by ``bash -lc``.
    channel : :class:`~kitty_harness.control.ControlProtocol`, optional
        Control channel to use instead of a :class:`ControlChannel` bound
        to this session's socket.
    kitty_bin : str, optional
        kitty binary, defaults to ``kitty`` on ``PATH``.
    use_panel : bool, optional
        Launch as a background panel. Auto-detected when ``None``.

    Examples
    --------
    >>> session = Session("/tmp", "htop")
    >>> session.state
    <SessionState.UNLAUNCHED: 'unlaunched'>
    >>> session.is_live
    False
    """

    def __init__(
        self,
        working_dir: StrPath,
        command: str,
        *,
        channel: ControlProtocol | None = None,
        kitty_bin: StrPath | None = None,
        use_panel: bool | None = None,
    ) -> None:
        self.working_dir = pathlib.Path(working_dir)
        self.command = command
        self.name = next_session_name()
        self.socket_path = socket_path(self.working_dir, self.name)
        self.kitty_bin = kitty_bin
        self.use_panel = use_panel
        self.channel: ControlProtocol = (
            channel
            if channel is not None
            else ControlChannel(f"unix:{self.socket_path}", kitty_bin=kitty_bin)
        )
        self.window_id: int | None = None
        self.state = SessionState.UNLAUNCHED

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.name} {self.state.value}"
            f" window_id={self.window_id})"
        )

    @property
    def socket_addr(self) -> str:
        """Remote control address of this session's kitty."""
        return self.channel.socket_addr

    @property
    def is_live(self) -> bool:
        """Whether control commands may be sent."""
        return self.state is SessionState.LAUNCHED

    def launch(self) -> Self:
        """Spawn kitty and wait until its first window answers.

        Raises
        ------
        :exc:`exc.SessionAlreadyLaunched`
            If the session was launched before.
        :exc:`exc.LaunchError`
            If kitty is missing, fails to start, or remote control does
            not come up.
            Windows kitty did open are closed and the socket file is
            removed before the error propagates.
        """
        if self.state is not SessionState.UNLAUNCHED:
            raise exc.SessionAlreadyLaunched(self.name)

        # a socket left over from a crashed run would refuse --listen-on
        with contextlib.suppress(FileNotFoundError):
            self.socket_path.unlink()

        spawn_kitty(
            self.working_dir,
            self.name,
            self.socket_addr,
            self.command,
            kitty_bin=self.kitty_bin,
            use_panel=self.use_panel,
        )
        try:
            self.window_id = self.channel.wait_for_window()
        except Exception:
            self._abandon_launch()
            raise
        self.state = SessionState.LAUNCHED
        logger.debug("launched %r running %r", self, self.command)
        return self

    def _abandon_launch(self) -> None:
        """Close whatever a half-started kitty left behind and drop its socket."""
        logger.warning("launch of %s failed, closing its windows", self.name)
        self._close_windows()
        with contextlib.suppress(OSError):
            self.socket_path.unlink()

    def _require_live(self) -> int:
        if self.state is not SessionState.LAUNCHED or self.window_id is None:
            raise exc.SessionNotLive(self.name, self.state.value)
        return self.window_id

    def send_text(self, text: str | bytes) -> None:
        """Send ``text`` as keyboard input, byte for byte."""
        self.send_text_to_window(self._require_live(), text)

    def send_encoded(self, data: bytes) -> None:
        """Send bytes produced by :func:`kitty_harness.keys.encode`."""
        self.channel.send_text(self._require_live(), data)

    def send_text_to_window(self, window_id: int, text: str | bytes) -> None:
        """Send ``text`` to another window of this session's kitty."""
        self._require_live()
        data = text.encode("utf-8") if isinstance(text, str) else text
        self.channel.send_text(window_id, data)

    def screen_text(self) -> str:
        """Return the visible screen with escape sequences kept.

        Only terminal padding is removed: trailing blanks on each line and
        trailing blank lines.
        """
        return self.screen_text_for_window(self._require_live())

    def screen_text_for_window(self, window_id: int) -> str:
        """Return the visible screen of ``window_id``, padding trimmed."""
        self._require_live()
        raw = self.channel.get_text(window_id).replace("\r\n", "\n")
        return clean_trailing_whitespace(raw)

    def screen_text_clean(self) -> CleanCapture:
        """Return ``(raw, stripped)`` for the visible screen.

        Examples
        --------
        >>> raw, clean = session.screen_text_clean()  # doctest: +SKIP
        >>> "$" in clean  # doctest: +SKIP
        True
        """
        raw = self.screen_text()
        return raw, strip_ansi(raw)

    def capture(self) -> CapturedScreen:
        """Return a fresh :class:`~kitty_harness.screen.CapturedScreen`."""
        return CapturedScreen(self.screen_text())

    def window_ids(self) -> list[int]:
        """Return every window id of this session's kitty."""
        self._require_live()
        return self.channel.list_window_ids()

    def resize(self, cols: int, rows: int) -> None:
        """Resize the OS window to ``cols`` by ``rows`` cells."""
        self._require_live()
        self.channel.resize_os_window(cols, rows)

    def close(self) -> None:
        """Close every window of the session.

        Safe to call more than once. Failures are logged and never raised,
        so a broken kitty at teardown cannot hide the test's own result.
        """
        if self.state is SessionState.CLOSED:
            return
        was_launched = self.state is SessionState.LAUNCHED
        self.state = SessionState.CLOSED
        if not was_launched:
            return

        self._close_windows()
        with contextlib.suppress(OSError):
            self.socket_path.unlink()
        logger.debug("closed %s", self.name)

    def _close_windows(self) -> None:
        """Close every listed window, falling back to the session's own."""
        try:
            window_ids = self.channel.list_window_ids()
        except (exc.KittyHarnessException, OSError) as e:
            logger.warning("could not list windows of %s: %s", self.name, e)
            window_ids = []
        if not window_ids and self.window_id is not None:
            window_ids = [self.window_id]

        for window_id in window_ids:
            try:
                self.channel.close_window(window_id)
            except (exc.KittyHarnessException, OSError) as e:
                logger.warning(
                    "could not close window %s of %s: %s",
                    window_id,
                    self.name,
                    e,
                )

    def __enter__(self) -> Self:
        """Launch the session if needed and return it."""
        if self.state is SessionState.UNLAUNCHED:
            self.launch()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Close the session."""
        self.close()

    def __del__(self) -> None:
        # attributes may be missing if __init__ raised
        if getattr(self, "state", None) is SessionState.LAUNCHED:
            self.close()


def launch(
    working_dir: StrPath,
    command: str,
    **kwargs: t.Any,
) -> Session:
    """Create and launch a :class:`Session`.

    Other Parameters
    ----------------
    kwargs : dict
        Keyword arguments passed into :class:`Session`
    """
    return Session(working_dir, command, **kwargs).launch()


@contextlib.contextmanager
def kitty_session(
    working_dir: StrPath,
    command: str,
    **kwargs: t.Any,
) -> Iterator[Session]:
    """Yield a launched session and close it on every exit path."""
    session = Session(working_dir, command, **kwargs)
    try:
        yield session.launch()
    finally:
        session.close()


def with_kitty_capture(
    working_dir: StrPath,
    command: str,
    driver: Callable[[Session], SampleT],
    **kwargs: t.Any,
) -> SampleT:
    """Launch ``command``, run ``driver`` against it, return its result.

    The session is closed afterwards even if ``driver`` raises.

    Examples
    --------
    >>> with_kitty_capture(
    ...     tmp_path,
    ...     "echo hi; sleep 5",
    ...     lambda s: s.screen_text_clean()[1],
    ... )  # doctest: +SKIP
    'hi'
    """
    with kitty_session(working_dir, command, **kwargs) as session:
        return driver(session)


def run_with_timeout(timeout: float, fn: Callable[[], SampleT]) -> SampleT:
    """Run ``fn`` in a daemon thread and return its result.

    Exceptions raised by ``fn`` are re-raised in the caller.

    Raises
    ------
    :exc:`exc.WaitTimeout`
        If ``fn`` has not finished after ``timeout`` seconds. Threads cannot
        be cancelled, so the worker keeps running, but being a daemon it
        does not hold up interpreter exit.
    """
    results: queue.Queue[tuple[bool, t.Any]] = queue.Queue(maxsize=1)

    def worker() -> None:
        try:
            results.put((True, fn()))
        except BaseException as e:
            results.put((False, e))

    start = time.monotonic()
    thread = threading.Thread(
        target=worker,
        name="kitty-harness-timeout",
        daemon=True,
    )
    thread.start()
    try:
        ok, value = results.get(timeout=timeout)
    except queue.Empty as e:
        elapsed = time.monotonic() - start
        msg = f"Operation did not finish within {timeout}s"
        raise exc.WaitTimeout(msg, timeout=timeout, elapsed=elapsed) from e
    if not ok:
        raise value
    return t.cast("SampleT", value)


def pause_briefly() -> None:
    """Sleep long enough for the application under test to redraw."""
    time.sleep(PAUSE_BRIEFLY_SECONDS)
