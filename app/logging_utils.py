"""
app/logging_utils.py

Structured logging helpers for import and maintenance workflows.
"""

from __future__ import annotations

import json
import logging
from typing import Any

_MAX_FIELD_CHARS = 500


def _clip(value: Any) -> Any:
    if isinstance(value, str) and len(value) > _MAX_FIELD_CHARS:
        return value[:_MAX_FIELD_CHARS] + "..."
    return value


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    Long string fields (raw row dumps) are clipped so a single bad row cannot
    flood the log.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **{key: _clip(value) for key, value in fields.items()}}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
