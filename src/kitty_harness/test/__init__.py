"""Helpers for tests that drive kitty through kitty_harness."""

from __future__ import annotations
