"""Pytest configuration for agtx tests."""

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _quiet_logging():
    """Keep loguru's default stderr sink out of test output."""
    logger.remove()
    yield


def pytest_collection_modifyitems(config, items):
    """Set per-directory timeouts: unit=1s, integration=5s."""
    for item in items:
        if "unit" in item.keywords:
            item.add_marker(pytest.mark.timeout(1))
        elif "integration" in item.keywords:
            item.add_marker(pytest.mark.timeout(5))
