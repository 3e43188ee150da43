"""Shared test fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Remove handlers installed by setup_logging during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
