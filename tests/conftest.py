"""Shared test configuration and pytest markers."""

import pytest

from speaking_assessor.services.pipeline import stage_registry


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: decodes real audio bytes through librosa"
    )


@pytest.fixture(autouse=True)
def _fresh_stage_registry():
    stage_registry.clear()
    yield
    stage_registry.clear()
