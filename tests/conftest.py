"""
Shared test fixtures for the Quill test suite.
"""

import pytest

from quill.config import reset_config


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts and ends with the default SerializerConfig."""
    reset_config()
    yield
    reset_config()
