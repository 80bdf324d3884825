import logging

import pytest


@pytest.fixture(autouse=True)
def reset_dostrans_logger():
    """Drop console handlers bound to a test's captured stderr"""
    yield
    logger = logging.getLogger("dostrans")
    for handler in list(logger.handlers):
        if getattr(handler, "dostrans_console", False):
            logger.removeHandler(handler)
