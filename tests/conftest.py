"""Shared fixtures for dataloader tests."""

import pytest

from dataloader import configure, reset_config


@pytest.fixture(autouse=True)
def fast_config():
    """Use a short polling interval and restore defaults afterwards."""
    reset_config()
    configure(interval=0.01)
    yield
    reset_config()


@pytest.fixture
def model() -> dict:
    return {}
