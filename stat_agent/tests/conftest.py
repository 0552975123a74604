import logging

import pytest


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers setup_logging attached so they never outlive a test's streams"""
    yield
    logger = logging.getLogger('stat_agent')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
