"""Metadata package for kitty_harness."""

from __future__ import annotations

__title__ = "kitty-test-harness"
__package_name__ = "kitty_harness"
__version__ = "0.3.0"
__description__ = (
    "Drive kitty terminal windows over remote control for integration tests"
)
__email__ = "kitty-harness@users.noreply.github.com"
__author__ = "kitty-test-harness contributors"
__github__ = "https://github.com/kitty-harness/kitty-test-harness"
__docs__ = "https://github.com/kitty-harness/kitty-test-harness#readme"
__tracker__ = "https://github.com/kitty-harness/kitty-test-harness/issues"
__pypi__ = "https://pypi.org/project/kitty-test-harness/"
__license__ = "MIT"
__copyright__ = "Copyright 2024- kitty-test-harness contributors"
