"""
Logging setup for the gridstrings package.
"""

import logging
import sys
from typing import Mapping, Optional

LOGGER_NAME = "gridstrings"

_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
# Touch and hit-test traces are easier to follow with the call site
_DEBUG_FORMAT = '%(asctime)s.%(msecs)03d - %(name)s:%(lineno)d - %(levelname)s - %(message)s'

# Third-party loggers that are noisy below WARNING
_QUIET_LIBRARIES = ("websockets",)


def parse_module_levels(specs: Optional[list]) -> dict:
    """
    Turn ``["hit_test=WARNING", "audio_engine=debug"]`` into a level map.

    Module names are relative to the package; a name that already starts
    with ``gridstrings`` is kept as-is.
    """
    levels = {}
    for spec in specs or ():
        name, sep, level_name = spec.partition("=")
        level = logging.getLevelName(level_name.strip().upper())
        if not sep or not name.strip() or not isinstance(level, int):
            raise ValueError(f"Expected MODULE=LEVEL, got {spec!r}")
        name = name.strip()
        if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
            name = f"{LOGGER_NAME}.{name}"
        levels[name] = level
    return levels


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    module_levels: Optional[Mapping[str, int]] = None,
) -> logging.Logger:
    """
    Configure the ``gridstrings`` logger and return it.

    Args:
        level: Package-wide level (e.g. logging.DEBUG, logging.INFO).
            At DEBUG the format adds milliseconds and the source line.
        log_file: Optional path to also write logs to.
        module_levels: Per-module overrides from ``parse_module_levels``,
            e.g. to keep ``hit_test`` quiet while debugging audio.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Re-running setup replaces our handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    fmt = _DEBUG_FORMAT if level <= logging.DEBUG else _FORMAT
    formatter = logging.Formatter(fmt, datefmt='%H:%M:%S')

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for name, module_level in (module_levels or {}).items():
        logging.getLogger(name).setLevel(module_level)

    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger.debug(
        "Logging initialized (level %s, %d module overrides)",
        logging.getLevelName(level), len(module_levels or {}),
    )
    return logger
