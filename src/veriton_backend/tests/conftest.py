"""
Pytest configuration and fixtures for all tests.
"""

from veriton_backend.tests.fixtures import (  # noqa: F401
    mock_db,
    principals,
    seed,
    test_db,
)
