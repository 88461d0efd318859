"""Helper methods for running kitty commands.

kitty_harness.common
~~~~~~~~~~~~~~~~~~~~

"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import typing as t

from . import exc
from .otel import kitty_span

if t.TYPE_CHECKING:
    from ._internal.types import StrPath

logger = logging.getLogger(__name__)

#: Binary name looked up on ``PATH`` when no explicit binary is given
KITTY_BIN = "kitty"


def which_kitty(kitty_bin: StrPath | None = None) -> str:
    """Resolve the kitty binary, raising if it is not executable.

    Parameters
    ----------
    kitty_bin : str | PathLike, optional
        Binary name or path. Defaults to ``kitty`` on ``PATH``.

    Raises
    ------
    :exc:`exc.KittyCommandNotFound`
    """
    name = os.fspath(kitty_bin) if kitty_bin is not None else KITTY_BIN
    resolved = shutil.which(name)
    if not resolved:
        raise exc.KittyCommandNotFound(name)
    return resolved


class kitty_cmd:
    """Run any :term:`kitty(1)` command through :py:mod:`subprocess`.

    Output is captured as text, split on newlines with trailing blank lines
    removed. ``stdout_raw`` keeps the undivided output.

    Examples
    --------
    >>> proc = kitty_cmd('@', '--to', 'unix:/tmp/kitty.sock', 'ls')
    >>> if proc.returncode:
    ...     raise exc.ControlCommandFailed(proc.cmd, proc.returncode, proc.stderr)

    Equivalent to:

    .. code-block:: console

        $ kitty @ --to unix:/tmp/kitty.sock ls

    Parameters
    ----------
    input : bytes, optional
        Bytes written verbatim to the command's stdin.
    kitty_bin : str | PathLike, optional
        Binary to run instead of ``kitty`` from ``PATH``.
    cwd : str | PathLike, optional
        Working directory of the child process.
    env : dict, optional
        Full environment of the child process.
    """

    def __init__(
        self,
        *args: t.Any,
        input: bytes | None = None,
        kitty_bin: StrPath | None = None,
        cwd: StrPath | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        cmd = [which_kitty(kitty_bin)]
        cmd += [str(c) for c in args]

        self.cmd = cmd

        with kitty_span(cmd[1:]) as span:
            if span.env:
                env = {**(os.environ if env is None else env), **span.env}
            try:
                self.process = subprocess.Popen(
                    cmd,
                    stdin=subprocess.PIPE if input is not None else subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    cwd=cwd,
                    env=env,
                )
                stdout, stderr = self.process.communicate(input)
                returncode = self.process.returncode
                span.record_exit(returncode)
            except Exception:
                logger.exception(f"Exception for {subprocess.list2cmdline(cmd)}")
                raise

        self.returncode = returncode

        self.stdout_raw = stdout.decode("utf-8", errors="backslashreplace")
        stdout_split = self.stdout_raw.split("\n")
        # remove trailing newlines from stdout
        while stdout_split and stdout_split[-1] == "":
            stdout_split.pop()
        self.stdout = stdout_split

        stderr_split = stderr.decode("utf-8", errors="backslashreplace").split("\n")
        self.stderr = list(filter(None, stderr_split))

        logger.debug(
            "kitty command %s returned %s, stdout: %s",
            " ".join(cmd),
            returncode,
            self.stdout,
        )


def get_version(kitty_bin: StrPath | None = None) -> str:
    """Return the kitty version, e.g. ``0.35.2``.

    Raises
    ------
    :exc:`exc.KittyCommandNotFound`
        If kitty is not on ``PATH``.
    :exc:`exc.KittyHarnessException`
        If ``kitty --version`` fails or prints something unexpected.
    """
    proc = kitty_cmd("--version", kitty_bin=kitty_bin)
    if proc.returncode or not proc.stdout:
        msg = f"kitty --version failed: {proc.stderr}"
        raise exc.KittyHarnessException(msg)

    match = re.search(r"kitty\s+(\d+(?:\.\d+)*)", proc.stdout[0])
    if match is None:
        msg = f"Unexpected kitty --version output: {proc.stdout[0]!r}"
        raise exc.KittyHarnessException(msg)
    return match.group(1)
