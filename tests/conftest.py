"""
Pytest configuration for keeper tests.

Configures pytest-asyncio for async test support.
"""

import pytest

from autokeeper.logging.models import Entry, LogLevel


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture
def sample_entry() -> Entry:
    return Entry(
        message="Test log message",
        level=LogLevel.INFO,
    )
