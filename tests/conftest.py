"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest

from tests import create_test_engine


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def test_engine():
    """In-memory SQLite engine with the schema created."""
    engine = create_test_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def app_context():
    """Fully wired AppContext over a fresh in-memory database, sync recompute."""
    from tests import create_test_context
    ctx = create_test_context()
    yield ctx
    ctx.close()
