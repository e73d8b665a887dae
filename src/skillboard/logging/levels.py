"""
HUMAN logging level -- readable curation traceability.

Custom level between INFO (20) and WARNING (30). It does not mean
severity: it marks the events a user wants to see (unit toggled,
category renamed, batch finished) without the technical noise.

Hierarchy:
    debug  (10) -> reconciliation details, per-unit moves
    info   (20) -> system operations (config loaded, units discovered)
    human  (25) -> * what changed on the board
    warn   (30) -> non-fatal problems (a move failed, save failed)
    error  (40) -> errors
"""

import logging

import structlog

# Custom level: between INFO (20) and WARNING (30)
HUMAN = 25
logging.addLevelName(HUMAN, "HUMAN")


# Inject the .human() method into Python's Logger class
def _human_method(self, message, *args, **kwargs):
    if self.isEnabledFor(HUMAN):
        self._log(HUMAN, message, args, **kwargs)


logging.Logger.human = _human_method

# Register the level in structlog to avoid KeyError: 25
if hasattr(structlog, "stdlib"):
    try:
        structlog.stdlib.LEVEL_TO_NAME[HUMAN] = "human"
        structlog.stdlib.NAME_TO_LEVEL["human"] = HUMAN
    except (AttributeError, KeyError):
        pass

# Unconfigured structlog (library use, tests) prints through PrintLogger
structlog.PrintLogger.human = structlog.PrintLogger.msg
