"""Root logger setup for the signature-trace and signature-web commands.

Library modules only create ``logging.getLogger(__name__)`` loggers and
never install handlers; the two entry points call configure_logging() once
after parsing their arguments.
"""

import logging

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s %(levelname)-8s [%(name)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Chatty at DEBUG: request lines from werkzeug, PNG chunk dumps from PIL
QUIET_LOGGERS = ('werkzeug', 'PIL')


def configure_logging(level: str = 'INFO', log_file: str | None = None) -> None:
    """Send tracer logs to stderr and, optionally, a file.

    Replaces any handlers already on the root logger, so calling it twice
    (for example from a test) never duplicates output.

    Args:
        level: Level name, case-insensitive. Unknown names mean INFO.
        log_file: Also append records to this path when given.

    Example:
        Trace a batch with the walker and solver counts visible::

            configure_logging(level='DEBUG', log_file='trace.log')
    """
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging configured: level=%s, file=%s", level, log_file or 'stderr')
