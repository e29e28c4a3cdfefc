"""Shared fixtures for mdsigil tests."""

import pytest

from mdsigil import load
from mdsigil.config import reset_expand_config
from mdsigil.registry import Registry


@pytest.fixture(scope="session")
def registry() -> Registry:
    """The built-in registry. Immutable, so one instance serves every test."""
    return load()


@pytest.fixture(autouse=True)
def _default_config():
    reset_expand_config()
    yield
    reset_expand_config()
