"""Logging configuration for the nvdeploy package."""
import logging

from .config import Config


def setup_logging(debug_mode: bool = False) -> None:
    """
    Configure root logging for the CLI.

    Args:
        debug_mode: Log at DEBUG instead of the configured LOG_LEVEL
    """
    log_level = logging.DEBUG if debug_mode else getattr(logging, Config.LOG_LEVEL, logging.INFO)
    logging.basicConfig(
        level=log_level,
        format=Config.LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[
            logging.StreamHandler()
        ]
    )
    # Disable debug logging for noisy libraries
    if not debug_mode:
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('kubernetes').setLevel(logging.WARNING)
