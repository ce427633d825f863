"""Root test configuration: isolates shared logging state between tests."""

import logging

import pytest
import structlog

import jsonlogging.diagnostic_context
import jsonlogging.handler


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Clear the diagnostic context and structlog configuration, and undo configure_logging()."""
    root_logger = logging.getLogger()
    original_level = root_logger.level
    original_record_factory = logging.getLogRecordFactory()
    jsonlogging.diagnostic_context.clear()
    structlog.reset_defaults()

    yield

    jsonlogging.diagnostic_context.clear()
    structlog.reset_defaults()
    for handler in list(root_logger.handlers):
        if isinstance(handler, jsonlogging.handler.CloudLoggingHandler):
            root_logger.removeHandler(handler)
    root_logger.setLevel(original_level)
    logging.setLogRecordFactory(original_record_factory)
