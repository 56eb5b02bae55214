"""Cache event records and the best-effort event logger."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jsonschema import Draft7Validator

EVENT_KINDS = ["read", "write", "read_failed", "write_failed"]

EVENT_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["kind", "key", "message", "occurred_at"],
    "properties": {
        "kind": {"type": "string", "enum": EVENT_KINDS},
        "key": {"type": "string"},
        "message": {"type": "string"},
        "occurred_at": {"type": "string", "format": "date-time"},
    },
    "additionalProperties": False,
}

_validator = Draft7Validator(EVENT_SCHEMA)

# ANSI styling for the event label
_BOLD = "\033[1m"
_CLEAR = "\033[0m"
_COLORS = {
    "read": "\033[90m",  # intense black
    "write": "\033[33m",  # yellow
}


def validate_event(payload: Dict[str, Any]) -> None:
    errors = sorted(_validator.iter_errors(payload), key=lambda e: e.path)
    if errors:
        messages = ", ".join(error.message for error in errors)
        raise ValueError(f"cache event validation failed: {messages}")


@dataclass
class CacheEvent:
    kind: str
    key: str
    message: str
    occurred_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "kind": self.kind,
            "key": self.key,
            "message": self.message,
            "occurred_at": self.occurred_at,
        }
        validate_event(payload)
        return payload

    def label(self, colorize: bool = False) -> str:
        text = f"Cached Resource {self.kind.upper()}"
        color = _COLORS.get(self.kind)
        if colorize and color:
            return f"{color}{_BOLD}{text}{_CLEAR}"
        return text


class EventLogger:
    """
    Records cache reads and writes to a logger.

    Side channel only: nothing raised while building, validating or emitting
    an event ever reaches the caller.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, colorize: bool = False) -> None:
        self._logger = logger or logging.getLogger("cached_resource")
        self._colorize = colorize
        self.last_event: Optional[CacheEvent] = None

    def log(self, kind: str, message: str, key: str = "") -> None:
        try:
            event = CacheEvent(kind=kind, key=key, message=message)
            event.to_dict()
            level = logging.WARNING if kind.endswith("_failed") else logging.INFO
            self._logger.log(level, f"{event.label(self._colorize)}  {message}")
            self.last_event = event
        except Exception:  # noqa: BLE001
            pass
