"""Shared fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Keep handlers and levels installed by CLI runs out of later tests."""
    package_logger = logging.getLogger("lexistore")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
