"""
Logging configuration utilities.

Console components log through named loggers (``collection.regula``,
``regula.session``, ``http`` ...). This helper wires the root logger with a
consistent format; the CLI calls it once at startup.
"""

import logging
from typing import Optional, Union


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> None:
    """Route every console logger through one stream handler (plus a file).

    ``level`` may be a number or a level name such as ``"debug"`` taken from
    ``CONSOLE_LOG_LEVEL``; names are matched case-insensitively and anything
    unrecognised falls back to INFO. Handlers installed earlier are replaced,
    so calling this again (tests, repeated CLI runs in one process) does not
    duplicate output.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )
