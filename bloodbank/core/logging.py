"""
Root logger configuration.

Every handler installed here carries ``RequestIDFilter``, so ``LOG_FORMAT`` may
reference ``%(request_id)s``: records logged inside a request (the middleware
passes ``extra={"request_id": ...}``) show the id, everything else shows N/A.
"""
import logging
import logging.handlers
import sys
import os
from bloodbank.core.config import settings

# Third-party loggers and the level they are held at
QUIET_LOGGERS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "httpx": logging.WARNING,
}

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


class RequestIDFilter(logging.Filter):
    def filter(self, record):
        if not getattr(record, 'request_id', None):
            record.request_id = 'N/A'
        return True


def _rotating_file_handler(path: str) -> logging.Handler:
    log_dir = os.path.dirname(path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding='utf-8'
    )


def setup_logging(log_format: str = None, log_file: str = None):
    """Replace the root logger's handlers with stdout (+ rotating file outside DEBUG)."""
    level = getattr(logging, settings.LOG_LEVEL.upper())
    log_file = settings.LOG_FILE if log_file is None else log_file

    handlers = [logging.StreamHandler(sys.stdout)]
    if not settings.DEBUG and log_file:
        handlers.append(_rotating_file_handler(log_file))

    formatter = logging.Formatter(log_format or settings.LOG_FORMAT)
    request_id_filter = RequestIDFilter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        handler.addFilter(request_id_filter)
        root_logger.addHandler(handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    return root_logger

# Initialize logging
logger = setup_logging()
