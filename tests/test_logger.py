"""Tests for setup_logging."""

import logging

import pytest

from tiny_barrier import setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    barrier_logger = logging.getLogger("tiny_barrier.barrier")
    barrier_level = barrier_logger.level
    yield root
    root.setLevel(level)
    root.handlers[:] = handlers
    barrier_logger.setLevel(barrier_level)


class TestSetupLogging:
    def test_level_name(self, root_logger):
        setup_logging("warning")
        assert root_logger.level == logging.WARNING

    def test_handler_added_once(self, root_logger):
        root_logger.handlers[:] = []
        setup_logging()
        setup_logging()
        assert len(root_logger.handlers) == 1

    def test_debug_barrier(self, root_logger):
        setup_logging(logging.INFO, debug_barrier=True)
        assert logging.getLogger("tiny_barrier.barrier").level == logging.DEBUG
