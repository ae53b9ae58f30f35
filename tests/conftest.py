"""Pytest configuration and fixtures for envtemplator tests.

This conftest.py ensures tests work for both developers (editable install)
and users (pip installed package).
"""
import os
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


@pytest.fixture(scope="session", autouse=True)
def setup_test_path():
    """Ensure the package root is in the Python path.

    This makes the package importable whether tests are run from:
    - The project root
    - The tests directory
    - Or after pip install
    """
    package_root_str = str(Path(__file__).parent.parent)
    if package_root_str not in sys.path:
        sys.path.insert(0, package_root_str)

    yield


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def clean_env():
    """Provide a clean environment for tests that modify env vars."""
    original_env = os.environ.copy()
    yield
    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def write_template(tmp_path):
    """Write a template file into the test directory and return its path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def services():
    """Heterogeneous entries as templates typically receive them."""
    return [
        {"Name": "web-1", "Role": "web", "Zone": "a", "Port": "8080", "Tags": "public,http"},
        {"Name": "db-1", "Role": "db", "Zone": "b", "Port": "5432"},
        {"Name": "web-2", "Role": "web", "Zone": "b", "Port": "8081", "Tags": "http"},
        {"Name": "cache-1", "Zone": "a", "Port": "6379", "Tags": "internal"},
    ]
