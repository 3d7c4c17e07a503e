from __future__ import annotations

import logging
from typing import Any, Dict

EVENTS_LOGGER = "teamcity_rest.events"

# Attributes every LogRecord already carries; extras must not shadow them.
RESERVED_LOG_KEYS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


def _clean_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in RESERVED_LOG_KEYS}


def log_event(event: str, logger: logging.Logger | None = None, **fields: Any) -> None:
    """
    Record a completed mutation on the server, e.g. "project.created" or
    "build_type.step_added", at INFO on the events logger.
    """
    log = logger or logging.getLogger(EVENTS_LOGGER)
    log.info(event, extra=_clean_fields(fields))


__all__ = ["log_event", "EVENTS_LOGGER", "RESERVED_LOG_KEYS"]
