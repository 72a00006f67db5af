"""Integration test fixtures for the kiln CLI."""

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def no_log_file(monkeypatch):
    """Keep CLI runs from writing ~/.kiln/kiln.log."""
    monkeypatch.setenv("KILN_LOGGING__FILE", "false")
