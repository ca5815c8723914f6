"""
Logging configuration for mixpoint
"""

import logging
import sys
from typing import Any, Optional

import numpy as np
import structlog


def _to_builtin(value: Any) -> Any:
    """numpy scalars and arrays as plain Python values."""
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, dict):
        return {k: _to_builtin(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_to_builtin(v) for v in value)
    return value


def numpy_values(logger, method_name, event_dict):
    """Structlog processor rendering analyzer outputs (numpy floats, curves) as builtins."""
    return {k: _to_builtin(v) for k, v in event_dict.items()}


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure structlog on top of stdlib logging.

    The report goes to stdout, so log lines go to stderr (and to
    log_file when given).

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of a file that also receives log lines
    """
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        format="%(message)s",
        handlers=handlers,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            numpy_values,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
