"""
Complete setup of the structured logging system.

Three independent pipelines:
1. File (JSON) -- when config.file is set. Captures everything (DEBUG+).
2. Human handler (stderr) -- HUMAN events only: what changed on the board.
3. Technical console (stderr) -- DEBUG/INFO, controlled by -v. Excludes HUMAN.

Default (no -v): the user only sees HUMAN lines plus warnings.
With -v: adds INFO. With -vv: adds DEBUG. With --quiet: silences everything.
Without -v, ``logging.level`` (or SKILLBOARD_LOG_LEVEL) sets the console
threshold; "warn" and "error" also hide the HUMAN lines.
"""

import logging
import sys
from pathlib import Path

import structlog

from ..config.schema import LoggingConfig
from .human import HumanLogHandler
from .levels import HUMAN


def configure_logging(
    config: LoggingConfig,
    json_output: bool = False,
    quiet: bool = False,
) -> None:
    """Configure the full logging system with three pipelines.

    Args:
        config: Logging configuration (level, file, verbose)
        json_output: If True, disables the human and console handlers (--json)
        quiet: If True, disables the human and console handlers (--quiet)
    """
    logging.root.handlers.clear()
    structlog.reset_defaults()

    # Root logger captures everything; handlers filter by level
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[],
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    show_human = not quiet and not json_output and _LEVELS[config.level] <= HUMAN
    show_console = not quiet and not json_output

    # ── Pipeline 1: JSON file ─────────────────────────────────────────────
    if config.file:
        file_path = Path(config.file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(str(file_path), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=shared_processors,
            )
        )
        logging.root.addHandler(file_handler)

    # ── Pipeline 2: Human handler ────────────────────────────────────────
    if show_human:
        human_handler = HumanLogHandler(stream=sys.stderr)
        human_handler.setLevel(HUMAN)
        human_handler.addFilter(lambda record: record.levelno == HUMAN)
        logging.root.addHandler(human_handler)

    # ── Pipeline 3: Technical console ────────────────────────────────────
    if show_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(_console_level(config))
        console_handler.addFilter(lambda record: record.levelno != HUMAN)
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(
                    colors=sys.stderr.isatty(),
                ),
                foreign_pre_chain=shared_processors,
            )
        )
        logging.root.addHandler(console_handler)

    # ── structlog ────────────────────────────────────────────────────────
    # Event dicts reach the handlers unrendered; each handler renders its own way
    structlog.configure(
        processors=shared_processors + [
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Console floor for each configured level; HUMAN has its own handler
_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "human": HUMAN,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _console_level(config: LoggingConfig) -> int:
    """Console threshold: -v wins when given, otherwise ``config.level``."""
    if config.verbose:
        return _verbose_to_level(config.verbose)
    level = _LEVELS[config.level]
    return level if level < HUMAN else max(level, logging.WARNING)


def _verbose_to_level(verbose: int) -> int:
    """Map the -v counter to a level for the console handler.

    No -v  -> WARNING (problems only; HUMAN goes through its own handler)
    -v     -> INFO
    -vv+   -> DEBUG
    """
    levels = {
        0: logging.WARNING,
        1: logging.INFO,
        2: logging.DEBUG,
    }
    return levels.get(verbose, logging.DEBUG)
