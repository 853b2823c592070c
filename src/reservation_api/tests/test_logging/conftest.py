import pytest

from reservation_api.config import get_settings
from reservation_api.core.logging.builder import setup_logging, stop_queue_logging


@pytest.fixture(autouse=True)
def restore_logging():
    """Tests here reconfigure logging; put the session configuration back."""
    yield
    stop_queue_logging()
    setup_logging(get_settings())
