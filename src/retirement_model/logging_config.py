# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Logging configuration for the retirement model.

The package only ever logs through module-level loggers under the
``retirement_model`` namespace. Nothing is emitted unless the embedding
application configures logging itself or calls :func:`setup_logging`.
"""

import logging
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "retirement_model"

LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Marker attribute so repeated setup calls replace our handlers only
_HANDLER_MARKER = "_retirement_model_handler"


def setup_logging(level: Union[int, str] = logging.INFO,
                  log_file: Optional[Path] = None) -> logging.Logger:
    """Attach console (and optionally file) handlers to the package logger.

    Calling this more than once replaces the handlers installed by the previous
    call rather than stacking duplicates.

    Args:
        level: Logging level for the package logger (name or number).
        log_file: Optional path of a log file to write in addition to stderr.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in logger.handlers[:]:
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    logger.setLevel(level.upper() if isinstance(level, str) else level)

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    setattr(console, _HANDLER_MARKER, True)
    logger.addHandler(console)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8', mode='a')
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARKER, True)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger inside the package namespace.

    Args:
        name: Dotted logger name, usually ``__name__``. Names outside the
              package namespace are nested under it.
    """
    if not name:
        return logging.getLogger(PACKAGE_LOGGER)
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
