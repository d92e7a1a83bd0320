import logging

from app.core.config import LOG_LEVEL

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configures the root logger once for the API process and the processor."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
