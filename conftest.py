"""Conftest.py (root-level).

We keep this in root pytest fixtures in pytest's doctest plugin to be available, as well
as avoiding conftest.py from being included in the wheel, in addition to pytest_plugin
for pytester only being available via the root directory.

See "pytest_plugins in non-top-level conftest files" in
https://docs.pytest.org/en/stable/deprecations.html
"""

from __future__ import annotations

import typing as t

import pytest

if t.TYPE_CHECKING:
    import pathlib

pytest_plugins = ["pytester"]


@pytest.fixture(autouse=True)
def clear_kitty_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's panel and OpenTelemetry settings out of unit tests."""
    for var in (
        "KITTY_TEST_USE_PANEL",
        "KITTY_HARNESS_OTEL",
        "OTEL_EXPORTER_OTLP_ENDPOINT",
        "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def bin_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Directory for generated executables."""
    path = tmp_path / "bin"
    path.mkdir()
    return path
