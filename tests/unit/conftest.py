"""
Unit test specific fixtures and utilities.

This module provides fixtures and utilities specifically for unit tests,
focusing on isolated testing with no network access.
"""

from unittest.mock import MagicMock

import pytest


@pytest.fixture
def mock_logger():
    """Provide a mock structured logger for unit tests."""
    logger = MagicMock()
    logger.info = MagicMock()
    logger.debug = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    return logger


@pytest.fixture
def recorded_requests() -> list:
    """Collect requests seen by a mock transport handler."""
    return []
