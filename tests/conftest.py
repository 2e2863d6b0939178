"""Shared pytest fixtures for reactree tests."""

import pytest

from reactree import _tracking, create_root


@pytest.fixture(autouse=True)
def reset_runtime():
    """Start every test with an empty tree and a fresh store."""
    _tracking.reset()
    yield
    _tracking.reset()


@pytest.fixture
def root():
    return create_root()
