"""Utility functions for dbctl."""
import logging
from pathlib import Path

def setup_logging(debug=False, log_dir=None):
    """Set up logging configuration."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_dir = Path(log_dir) if log_dir else Path.home() / '.dbctl' / 'logs'
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / 'dbctl.log'

    logger = logging.getLogger('dbctl')
    logger.setLevel(log_level)

    # Avoid duplicate handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')
    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if debug:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    return log_file
