import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_loggers = {}
_level = logging.INFO


def get_logger(name, level=None):
    """Module logger with a single stream handler attached."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(level or _level)
    _loggers[name] = logger
    return logger


def set_level(level):
    """Applies the configured level to every logger handed out so far and to later ones."""
    global _level
    _level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    for logger in _loggers.values():
        logger.setLevel(_level)
