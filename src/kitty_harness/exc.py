"""Provide exceptions used by kitty_harness.

kitty_harness.exc
~~~~~~~~~~~~~~~~~

Notes
-----
Every exception inherits from :exc:`KittyHarnessException`. Launch and
control failures are kept apart so a test can tell "the terminal
misbehaved" from "the harness was used wrong".
"""

from __future__ import annotations

import typing as t


class KittyHarnessException(Exception):
    """Base exception for all kitty_harness errors."""


class LaunchError(KittyHarnessException):
    """Raised when a kitty window cannot be launched or reached."""


class KittyCommandNotFound(LaunchError):
    """Raised when the kitty binary cannot be found on the system."""

    def __init__(self, binary: str = "kitty", *args: object) -> None:
        super().__init__(f"{binary} binary not found on PATH")


class ControlError(KittyHarnessException):
    """Base exception for failed remote control commands."""


class ControlCommandFailed(ControlError):
    """Raised when ``kitty @`` exits with a non-zero status."""

    def __init__(
        self,
        cmd: list[str],
        returncode: int,
        stderr: list[str] | None = None,
        *args: object,
    ) -> None:
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr or []
        msg = f"kitty command {' '.join(cmd)!r} failed with status {returncode}"
        if self.stderr:
            msg += f": {' '.join(self.stderr)}"
        super().__init__(msg)


class SessionNotLive(ControlError):
    """Raised when a command targets a session that is not launched.

    This covers both sessions that were never launched and sessions that
    have already been closed. It is a usage error rather than a terminal
    failure.
    """

    def __init__(self, session_name: str, state: str, *args: object) -> None:
        self.session_name = session_name
        self.state = state
        super().__init__(f"Session {session_name} is {state}, not launched")


class SessionAlreadyLaunched(KittyHarnessException):
    """Raised if :meth:`Session.launch` is called on a launched session."""

    def __init__(self, session_name: str, *args: object) -> None:
        super().__init__(f"Session {session_name} was already launched")


class EncodingError(KittyHarnessException, ValueError):
    """Raised if a key and modifier combination has no byte encoding."""

    def __init__(self, key: str, modifiers: t.Any, hint: str = "") -> None:
        self.key = key
        self.modifiers = modifiers
        msg = f"Cannot encode key {key!r} with modifiers {modifiers}"
        if hint:
            msg += f" ({hint})"
        super().__init__(msg)


class WaitTimeout(KittyHarnessException):
    """Raised when a function times out waiting for a condition.

    Attributes
    ----------
    elapsed : float | None
        Seconds spent polling before giving up.
    last_sample : Any
        The final value observed, for diagnostics.
    samples : int
        How many times the condition was sampled.
    """

    def __init__(
        self,
        msg: str | None = None,
        *,
        timeout: float | None = None,
        elapsed: float | None = None,
        last_sample: t.Any = None,
        samples: int = 0,
    ) -> None:
        self.timeout = timeout
        self.elapsed = elapsed
        self.last_sample = last_sample
        self.samples = samples
        if msg is None:
            msg = f"Timed out after {elapsed:.3f}s" if elapsed is not None else ""
            if samples:
                msg += f" ({samples} samples), last sample: {last_sample!r}"
        super().__init__(msg)


class MockLogParseError(KittyHarnessException):
    """Raised when a mock invocation log is missing or malformed."""

    def __init__(self, path: t.Any, reason: str, *args: object) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot parse mock log {path}: {reason}")


class ReplayParseError(KittyHarnessException, ValueError):
    """Raised when a recording line cannot be parsed."""

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        self.line_number = line_number
        self.line = line
        super().__init__(f"line {line_number}: {reason}: {line!r}")
