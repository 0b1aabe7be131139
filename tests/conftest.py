import logging

import pytest


@pytest.fixture(autouse=True)
def reset_polyschema_logger():
    """Undo any CLI logging setup so caplog sees every record."""
    yield
    logger = logging.getLogger("polyschema")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
