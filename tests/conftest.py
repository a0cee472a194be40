"""Shared pytest fixtures and configuration."""

import pytest

from libcard.record_store import RecordStore


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def store():
    """Create an in-memory RecordStore."""
    s = RecordStore(":memory:")
    yield s
    s.close()
