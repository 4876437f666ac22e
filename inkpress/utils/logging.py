"""Logging setup for inkpress.

Every module logs through ``logging.getLogger(__name__)``, so all output hangs
off the ``inkpress`` logger. Applications call configure_package_logging()
once; without it only warnings reach the root logger's default handler.
"""

import logging
import sys
from pathlib import Path
from typing import Mapping, Optional, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LEVEL = logging.INFO

PACKAGE_LOGGER = "inkpress"
# Children of PACKAGE_LOGGER that can be tuned individually
MODULE_LOGGERS = ("codec", "processing", "converter", "image_processor", "config")

LevelLike = Union[int, str]


def resolve_level(level: LevelLike) -> int:
    """Map a level name ("debug", "WARNING") or number to a logging level.

    Unknown names resolve to INFO.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.INFO
    return level


def setup_logger(
    name: str,
    level: LevelLike = DEFAULT_LEVEL,
    log_format: str = DEFAULT_FORMAT,
    log_file: Optional[str] = None,
    console: bool = True,
) -> logging.Logger:
    """Attach stdout and/or file output to a logger.

    A logger that already has a console or file handler does not get a second
    one, so calling this again only changes the level.

    Args:
        name: Logger name, normally "inkpress"
        level: Level name or number
        log_format: Format string shared by both handlers
        log_file: Optional log file; missing parent directories are created
        console: Also write to stdout

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level))

    formatter = logging.Formatter(log_format)
    kinds = {type(handler) for handler in logger.handlers}

    if log_file and logging.FileHandler not in kinds:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console and logging.StreamHandler not in kinds:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def set_log_level(logger: logging.Logger, level: LevelLike) -> None:
    logger.setLevel(resolve_level(level))


def configure_package_logging(
    level: LevelLike = DEFAULT_LEVEL,
    log_file: Optional[str] = None,
    console: bool = True,
    module_levels: Optional[Mapping[str, LevelLike]] = None,
    log_format: str = DEFAULT_FORMAT,
) -> dict[str, logging.Logger]:
    """Configure the inkpress logger tree.

    Handlers go on the package logger only; module loggers inherit them and
    just get a level. ``module_levels`` overrides that level per module, e.g.
    ``{"codec": "WARNING"}`` keeps chunk-level debug output quiet while the
    converter logs at DEBUG.

    Args:
        level: Level for the package and every module logger
        log_file: Optional log file
        console: Also write to stdout
        module_levels: Per-module level overrides keyed by MODULE_LOGGERS names
        log_format: Format string for the handlers

    Returns:
        Loggers keyed by "root" and the module names

    Raises:
        ValueError: If module_levels names an unknown module
    """
    overrides = dict(module_levels or {})
    unknown = set(overrides) - set(MODULE_LOGGERS)
    if unknown:
        raise ValueError(f"Unknown inkpress modules in module_levels: {sorted(unknown)}")

    loggers = {
        "root": setup_logger(
            PACKAGE_LOGGER, level=level, log_format=log_format, log_file=log_file, console=console
        )
    }
    for module in MODULE_LOGGERS:
        module_logger = logging.getLogger(f"{PACKAGE_LOGGER}.{module}")
        set_log_level(module_logger, overrides.get(module, level))
        loggers[module] = module_logger
    return loggers
