"""
Pytest configuration and fixtures for the pica test suite.
"""

import pytest
from pathlib import Path

from pica import Field, Record


@pytest.fixture(scope="session")
def fixture_dir():
    """Return path to test fixtures directory."""
    return Path(__file__).parent.parent / "data" / "fixtures"


@pytest.fixture(scope="session")
def sample_text(fixture_dir):
    """Load the sample PICA+ record as text."""
    path = fixture_dir / "sample.pica"
    if not path.exists():
        pytest.skip(f"Fixture not found: {path}")
    return path.read_text(encoding="utf-8")


@pytest.fixture
def sample_record(sample_text):
    """Parse the sample record."""
    return Record.parse(sample_text)


@pytest.fixture
def occurrence_record():
    """Record with 028A fields of every occurrence kind."""
    record = Record()
    record.append(Field("028A", "01").append("a", "first-01"))
    record.append(Field("028A").append("a", "plain"))
    record.append(Field("028A", "02").append("a", "second-02"))
    record.append(Field("028A", "00").append("a", "zero-00"))
    return record


@pytest.fixture(scope="session")
def large_text(sample_text):
    """Many copies of the sample record fields, for benchmarks."""
    return "\n".join([sample_text] * 200)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "benchmark: mark test as a benchmark (deselect with '-m \"not benchmark\"')"
    )
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (deselect with '-m \"not slow\"')"
    )
