"""Logging setup for the ``feacli`` entry point."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%H:%M:%S"

# SQLAlchemy logs every statement at INFO once its engine logger inherits that level
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def configure_logging(*, level: int | str = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once for CLI output.

    ``level`` is a logging constant or its name (``"debug"``). Pass ``force=True`` to
    reconfigure during tests.
    """

    if isinstance(level, str):
        resolved = logging.getLevelNamesMapping().get(level.upper())
    else:
        resolved = level
    if resolved is None:
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=DATE_FORMAT, force=force)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
