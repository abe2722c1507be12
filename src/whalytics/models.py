from __future__ import annotations

import time as _time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .errors import ValidationError

# JSON-compatible value: None, bool, int, float, str, list or dict of these.
PropertyValue = Any
Properties = Dict[str, PropertyValue]


def current_unix_time() -> int:
    return int(_time.time())


@dataclass
class EventRecord:
    """A single analytics event as it travels to the ingestion endpoint."""

    event: str
    user_id: str
    session_id: str
    time: int = field(default_factory=current_unix_time)
    event_properties: Properties = field(default_factory=dict)
    user_properties: Properties = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "event": self.event,
            "user_id": self.user_id,
            "session_id": self.session_id,
            "time": self.time,
        }
        if self.event_properties:
            payload["event_properties"] = dict(self.event_properties)
        if self.user_properties:
            payload["user_properties"] = dict(self.user_properties)
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "EventRecord":
        missing = [
            key for key in ("event", "user_id", "session_id", "time") if key not in payload
        ]
        if missing:
            raise ValidationError(f"payload is missing {', '.join(missing)}")
        return cls(
            event=payload["event"],
            user_id=payload["user_id"],
            session_id=payload["session_id"],
            time=payload["time"],
            event_properties=dict(payload.get("event_properties") or {}),
            user_properties=dict(payload.get("user_properties") or {}),
        )


class EventBuilder:
    """Fluent builder for :class:`EventRecord`.

    ``event``, ``user_id`` and ``session_id`` are required; ``time`` falls
    back to the current Unix time when ``build()`` is called.
    """

    def __init__(self) -> None:
        self._event: Optional[str] = None
        self._user_id: Optional[str] = None
        self._session_id: Optional[str] = None
        self._time: Optional[int] = None
        self._event_properties: Properties = {}
        self._user_properties: Properties = {}

    def event(self, name: str) -> "EventBuilder":
        self._event = name
        return self

    def user_id(self, user_id: str) -> "EventBuilder":
        self._user_id = user_id
        return self

    def session_id(self, session_id: str) -> "EventBuilder":
        self._session_id = session_id
        return self

    def time(self, seconds: int) -> "EventBuilder":
        self._time = seconds
        return self

    def event_properties(self, properties: Mapping[str, PropertyValue]) -> "EventBuilder":
        self._event_properties = dict(properties)
        return self

    def event_property(self, key: str, value: PropertyValue) -> "EventBuilder":
        self._event_properties[key] = value
        return self

    def user_properties(self, properties: Mapping[str, PropertyValue]) -> "EventBuilder":
        self._user_properties = dict(properties)
        return self

    def user_property(self, key: str, value: PropertyValue) -> "EventBuilder":
        self._user_properties[key] = value
        return self

    def validate(self) -> None:
        for label, value in (
            ("event", self._event),
            ("user_id", self._user_id),
            ("session_id", self._session_id),
        ):
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{label} is required")
        if self._time is not None:
            # bool is an int subclass but never a timestamp
            if isinstance(self._time, bool) or not isinstance(self._time, int):
                raise ValidationError("time must be an integer number of seconds")
            if self._time < 0:
                raise ValidationError("time must not be negative")

    def build(self) -> EventRecord:
        self.validate()
        return EventRecord(
            event=self._event,
            user_id=self._user_id,
            session_id=self._session_id,
            time=self._time if self._time is not None else current_unix_time(),
            event_properties=dict(self._event_properties),
            user_properties=dict(self._user_properties),
        )
