"""
Logging Configuration
Sets up the winding_designer logger for the Tk app and the headless CLI
"""
import logging
import sys
from typing import Optional, Union

LOGGER_NAME = "winding_designer"
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')

# matplotlib and PIL chatter at DEBUG (font scans, PNG chunks)
NOISY_LOGGERS = ('matplotlib', 'PIL')


def resolve_level(level: Union[int, str]) -> int:
    """Accept a logging constant or a name such as 'debug' / 'INFO'"""
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level {level!r}; expected one of {LOG_LEVELS}")
    return numeric


def setup_logging(level: Union[int, str] = logging.INFO,
                  log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the 'winding_designer' namespace and return its logger.

    Args:
        level: Logging constant or level name, e.g. the --log-level value
        log_file: Optional path; the file is rewritten on every run
    """
    numeric = resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric)
    logger.propagate = False

    # Calling setup twice (tests, a restarted app) must not double every line
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        '%(asctime)s %(levelname)-7s %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))

    logger.debug("Logging at %s%s", logging.getLevelName(numeric),
                 f", also writing {log_file}" if log_file else "")
    return logger
