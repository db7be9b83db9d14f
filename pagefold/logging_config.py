from __future__ import annotations

"""Central logging configuration for pagefold.

Import and call :func:`setup_logging` at application start-up.  Library code
only ever calls ``logging.getLogger(__name__)``.
"""

import copy
import logging
import logging.config
import os
from typing import Iterable, Optional

from pagefold.config import ConfigManager

__all__ = ["setup_logging"]


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application using the YAML configuration."""
    log_dir = os.environ.get("PAGEFOLD_LOG_DIR", "logs")
    log_file = os.path.join(log_dir, "pagefold.log")

    try:
        logging_config = copy.deepcopy(ConfigManager().get_logging_config())
        if logging_config and isinstance(logging_config, dict) and logging_config.get("version"):
            # Update the filename dynamically
            if "handlers" in logging_config and "file" in logging_config["handlers"]:
                os.makedirs(log_dir, exist_ok=True)
                logging_config["handlers"]["file"]["filename"] = log_file

            logging.config.dictConfig(logging_config)
            logging.getLogger("pagefold").debug("===== Logging initialised from config files =====")
        else:
            _setup_minimal_logging()
    except (ValueError, TypeError, AttributeError, ImportError, OSError) as exc:
        # Invalid dictConfig content or unwritable log directory
        _setup_minimal_logging()
        logging.getLogger("pagefold").warning("Logging config rejected, using console only: %s", exc)

    targets = ["pagefold"] if verbose else []
    _apply_debug_overrides(targets)


def _setup_minimal_logging() -> None:
    """Set up minimal console-only logging when config is unavailable."""
    minimal_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'simple': {
                'format': '%(levelname)s %(name)s: %(message)s',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'simple',
                'level': 'INFO',
            },
        },
        'root': {
            'level': 'INFO',
            'handlers': ['console'],
        },
    }

    logging.config.dictConfig(minimal_config)


def _apply_debug_overrides(extra: Optional[Iterable[str]] = None) -> None:
    """Apply environment-driven module-specific debug overrides.

    Supports ``PAGEFOLD_DEBUG_MODULES=comma,separated,logger,names``; the
    ``--verbose`` CLI flag adds the ``pagefold`` logger.
    """
    targets = list(extra or [])
    extra_modules = os.environ.get('PAGEFOLD_DEBUG_MODULES', '').strip()
    if extra_modules:
        targets.extend([m.strip() for m in extra_modules.split(',') if m.strip()])
    for name in targets:
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        # Ensure a console handler emits DEBUG for this logger
        console_handlers = [
            h for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ]
        for h in console_handlers:
            h.setLevel(logging.DEBUG)
        if not console_handlers:
            h = logging.StreamHandler()
            h.setLevel(logging.DEBUG)
            h.setFormatter(logging.Formatter('%(levelname)s %(name)s: %(message)s'))
            logger.addHandler(h)
            logger.propagate = False
        logger.debug("Debug override active for logger '%s'", name)
