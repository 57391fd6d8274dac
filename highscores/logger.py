import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

def get_logger(name: str = 'highscores') -> logging.Logger:
    """Return the shared service logger, attaching a stream handler once"""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(os.getenv('LOG_LEVEL', 'INFO').upper())
    return logger
