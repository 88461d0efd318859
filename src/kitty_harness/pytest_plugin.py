"""kitty_harness pytest plugin."""

from __future__ import annotations

import logging
import typing as t

import pytest

from kitty_harness.session import Session
from kitty_harness.test.environment import kitty_unavailable_reason
from kitty_harness.test.mock import create_mock_executable

if t.TYPE_CHECKING:
    import pathlib
    from collections.abc import Callable

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session")
def kitty_available() -> None:
    """Skip the requesting test unless live kitty tests can run.

    Requires ``KITTY_TESTS=1``, a display and a working ``kitty`` binary.
    """
    reason = kitty_unavailable_reason()
    if reason is not None:
        pytest.skip(f"skipping kitty tests: {reason}")


@pytest.fixture
def kitty_workdir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Return the working directory, and socket directory, for sessions."""
    workdir = tmp_path / "kitty"
    workdir.mkdir()
    return workdir


@pytest.fixture
def kitty(
    request: pytest.FixtureRequest,
    kitty_available: None,
    kitty_workdir: pathlib.Path,
) -> Callable[..., Session]:
    """Return a factory launching :class:`Session`\\s closed after the test.

    >>> def test_example(kitty) -> None:
    ...     session = kitty("printf 'hello\\n'; sleep 30")
    ...     assert session.is_live

    Keyword arguments are passed into :class:`Session`; ``working_dir``
    defaults to :func:`kitty_workdir`.
    """
    sessions: list[Session] = []

    def factory(command: str, **kwargs: t.Any) -> Session:
        kwargs.setdefault("working_dir", kitty_workdir)
        session = Session(command=command, **kwargs)
        sessions.append(session)
        return session.launch()

    def fin() -> None:
        for session in sessions:
            session.close()

    request.addfinalizer(fin)

    return factory


@pytest.fixture
def mock_bin_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Return an empty directory for generated executables."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    return bin_dir


@pytest.fixture
def mock_log_path(tmp_path: pathlib.Path) -> pathlib.Path:
    """Return the path mock executables log their invocations to.

    The file does not exist until the first invocation.
    """
    return tmp_path / "mock-invocations.log"


@pytest.fixture
def mock_executable(
    mock_log_path: pathlib.Path,
    mock_bin_dir: pathlib.Path,
) -> pathlib.Path:
    """Return a mock executable logging to :func:`mock_log_path`."""
    return create_mock_executable(mock_log_path, mock_bin_dir)
