"""Fixtures for kitty_harness unit tests."""

from __future__ import annotations

import logging
import typing as t

import pytest

from kitty_harness import session as session_module
from kitty_harness.session import Session

from tests.helpers import FakeChannel

if t.TYPE_CHECKING:
    import pathlib

logger = logging.getLogger(__name__)


@pytest.fixture
def spawned(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, t.Any]]:
    """Replace kitty process creation, recording each spawn's arguments."""
    calls: list[dict[str, t.Any]] = []

    def fake_spawn(
        working_dir: t.Any,
        session_name: str,
        socket_addr: str,
        command: str,
        **kwargs: t.Any,
    ) -> None:
        calls.append(
            {
                "working_dir": working_dir,
                "session_name": session_name,
                "socket_addr": socket_addr,
                "command": command,
                **kwargs,
            },
        )

    monkeypatch.setattr(session_module, "spawn_kitty", fake_spawn)
    return calls


@pytest.fixture
def fake_channel() -> FakeChannel:
    """Return a fresh :class:`FakeChannel`."""
    return FakeChannel()


@pytest.fixture
def fake_session(
    tmp_path: pathlib.Path,
    fake_channel: FakeChannel,
    spawned: list[dict[str, t.Any]],
) -> t.Iterator[Session]:
    """Return a launched session backed by :func:`fake_channel`."""
    session = Session(tmp_path, "cat", channel=fake_channel)
    session.launch()
    yield session
    session.close()
