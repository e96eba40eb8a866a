# core/logging_config.py
import logging

LOG_FORMAT = "%(asctime)s level=%(levelname)s logger=%(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a single key=value stream handler."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)
