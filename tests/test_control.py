"""Tests for kitty_harness.control."""

from __future__ import annotations

import json
import textwrap
import typing as t

import pytest

from kitty_harness import exc
from kitty_harness.control import ControlChannel, window_ids_from_ls
from kitty_harness.test.mock import create_mock_executable, parse_mock_log

if t.TYPE_CHECKING:
    import pathlib

SOCKET = "unix:/tmp/kitty-test-control.sock"

LS_OUTPUT = [
    {
        "id": 1,
        "tabs": [
            {"id": 1, "windows": [{"id": 3}, {"id": 9}]},
            {"id": 2, "windows": [{"id": 12}]},
        ],
    },
]


def write_script(bin_dir: pathlib.Path, body: str, name: str = "kitty") -> pathlib.Path:
    """Write an executable bash script standing in for kitty."""
    path = bin_dir / name
    path.write_text("#!/usr/bin/env bash\n" + textwrap.dedent(body))
    path.chmod(0o755)
    return path


@pytest.fixture
def logging_kitty(tmp_path: pathlib.Path, bin_dir: pathlib.Path) -> pathlib.Path:
    """Return a fake kitty logging its arguments to ``calls.log``."""
    return create_mock_executable(tmp_path / "calls.log", bin_dir, name="kitty")


class WindowIdsFixture(t.NamedTuple):
    """Test fixture for window_ids_from_ls()."""

    test_id: str
    ls: list[dict[str, t.Any]]
    expected: list[int]


WINDOW_IDS_FIXTURES: list[WindowIdsFixture] = [
    WindowIdsFixture(test_id="empty", ls=[], expected=[]),
    WindowIdsFixture(
        test_id="no_tabs",
        ls=[{"id": 1, "tabs": []}],
        expected=[],
    ),
    WindowIdsFixture(test_id="nested", ls=LS_OUTPUT, expected=[3, 9, 12]),
    WindowIdsFixture(
        test_id="several_os_windows",
        ls=[
            {"tabs": [{"windows": [{"id": 2}]}]},
            {"tabs": [{"windows": [{"id": "5"}]}]},
        ],
        expected=[2, 5],
    ),
]


@pytest.mark.parametrize(
    list(WindowIdsFixture._fields),
    WINDOW_IDS_FIXTURES,
    ids=[f.test_id for f in WINDOW_IDS_FIXTURES],
)
def test_window_ids_from_ls(
    test_id: str,
    ls: list[dict[str, t.Any]],
    expected: list[int],
) -> None:
    """Window ids are flattened in listing order."""
    assert window_ids_from_ls(ls) == expected


class CommandArgsFixture(t.NamedTuple):
    """Test fixture for the arguments of each control command."""

    test_id: str
    call: t.Callable[[ControlChannel], t.Any]
    expected_args: list[str]


COMMAND_ARGS_FIXTURES: list[CommandArgsFixture] = [
    CommandArgsFixture(
        test_id="get_text",
        call=lambda c: c.get_text(4),
        expected_args=[
            "get-text",
            "--match",
            "id:4",
            "--ansi",
            "--extent",
            "screen",
        ],
    ),
    CommandArgsFixture(
        test_id="close_window",
        call=lambda c: c.close_window(4),
        expected_args=["close-window", "--match", "id:4"],
    ),
    CommandArgsFixture(
        test_id="send_text",
        call=lambda c: c.send_text(4, b"x"),
        expected_args=["send-text", "--match", "id:4", "--stdin"],
    ),
    CommandArgsFixture(
        test_id="resize_os_window",
        call=lambda c: c.resize_os_window(100, 30),
        expected_args=[
            "resize-os-window",
            "--action",
            "resize",
            "--width",
            "100",
            "--height",
            "30",
            "--unit",
            "cells",
        ],
    ),
]


@pytest.mark.parametrize(
    list(CommandArgsFixture._fields),
    COMMAND_ARGS_FIXTURES,
    ids=[f.test_id for f in COMMAND_ARGS_FIXTURES],
)
def test_command_args(
    test_id: str,
    call: t.Callable[[ControlChannel], t.Any],
    expected_args: list[str],
    logging_kitty: pathlib.Path,
    tmp_path: pathlib.Path,
) -> None:
    """Every command is addressed to the channel's socket."""
    channel = ControlChannel(SOCKET, kitty_bin=logging_kitty)

    call(channel)

    assert parse_mock_log(tmp_path / "calls.log") == [
        ["@", "--to", SOCKET, *expected_args],
    ]


def test_send_text_uses_stdin_verbatim(
    tmp_path: pathlib.Path,
    bin_dir: pathlib.Path,
) -> None:
    """Bytes arrive unchanged, escapes and NULs included."""
    received = tmp_path / "stdin.bin"
    kitty = write_script(bin_dir, f"cat > {received}\n")
    payload = b"\x1b[A\x00q\\n\xe2\x9c\x93"

    ControlChannel(SOCKET, kitty_bin=kitty).send_text(1, payload)

    assert received.read_bytes() == payload


def test_get_text_returns_stdout(bin_dir: pathlib.Path) -> None:
    """Screen text keeps escape sequences and line structure."""
    kitty = write_script(bin_dir, "printf '\\033[1mhi\\033[0m\\nthere\\n'\n")

    text = ControlChannel(SOCKET, kitty_bin=kitty).get_text(1)

    assert text == "\x1b[1mhi\x1b[0m\nthere\n"


def test_list_windows(bin_dir: pathlib.Path) -> None:
    """ls output is parsed as JSON."""
    kitty = write_script(bin_dir, f"echo '{json.dumps(LS_OUTPUT)}'\n")
    channel = ControlChannel(SOCKET, kitty_bin=kitty)

    assert channel.list_windows() == LS_OUTPUT
    assert channel.list_window_ids() == [3, 9, 12]


@pytest.mark.parametrize(
    "output",
    ["not json", '{"tabs": []}'],
    ids=["invalid_json", "not_a_list"],
)
def test_list_windows_rejects_bad_output(bin_dir: pathlib.Path, output: str) -> None:
    """Unexpected ls output is a control error."""
    kitty = write_script(bin_dir, f"echo '{output}'\n")

    with pytest.raises(exc.ControlError):
        ControlChannel(SOCKET, kitty_bin=kitty).list_windows()


def test_failed_command(bin_dir: pathlib.Path) -> None:
    """A non-zero exit raises with the command, status and stderr."""
    kitty = write_script(bin_dir, "echo 'no such window' >&2\nexit 3\n")

    with pytest.raises(exc.ControlCommandFailed) as excinfo:
        ControlChannel(SOCKET, kitty_bin=kitty).close_window(7)

    error = excinfo.value
    assert error.returncode == 3
    assert error.stderr == ["no such window"]
    assert error.cmd[1:] == ["@", "--to", SOCKET, "close-window", "--match", "id:7"]
    assert "no such window" in str(error)


def test_missing_kitty(tmp_path: pathlib.Path) -> None:
    """A missing binary is reported before anything runs."""
    channel = ControlChannel(SOCKET, kitty_bin=tmp_path / "no-such-kitty")

    with pytest.raises(exc.KittyCommandNotFound):
        channel.list_windows()


def test_wait_for_window(tmp_path: pathlib.Path, bin_dir: pathlib.Path) -> None:
    """Polling continues until a window shows up."""
    counter = tmp_path / "count"
    kitty = write_script(
        bin_dir,
        f"""\
        echo x >> {counter}
        if [ "$(wc -l < {counter})" -lt 3 ]; then
            echo 'connection refused' >&2
            exit 1
        fi
        echo '{json.dumps(LS_OUTPUT)}'
        """,
    )

    window_id = ControlChannel(SOCKET, kitty_bin=kitty).wait_for_window(
        retries=5,
        interval=0,
    )

    assert window_id == 3
    assert len(counter.read_text().splitlines()) == 3


def test_wait_for_window_gives_up(bin_dir: pathlib.Path) -> None:
    """LaunchError names the socket and the last failure."""
    kitty = write_script(bin_dir, "echo 'connection refused' >&2\nexit 1\n")

    with pytest.raises(exc.LaunchError) as excinfo:
        ControlChannel(SOCKET, kitty_bin=kitty).wait_for_window(retries=2, interval=0)

    assert SOCKET in str(excinfo.value)
    assert "connection refused" in str(excinfo.value)


def test_wait_for_window_without_windows(bin_dir: pathlib.Path) -> None:
    """An empty listing counts as not ready."""
    kitty = write_script(bin_dir, "echo '[]'\n")

    with pytest.raises(exc.LaunchError):
        ControlChannel(SOCKET, kitty_bin=kitty).wait_for_window(retries=2, interval=0)
