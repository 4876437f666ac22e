"""Logging setup and stage timing."""

from .logging import configure_package_logging, resolve_level, set_log_level, setup_logger
from .performance import PIPELINE_STAGES, StageTimer

__all__ = [
    "PIPELINE_STAGES",
    "StageTimer",
    "configure_package_logging",
    "resolve_level",
    "set_log_level",
    "setup_logger",
]
