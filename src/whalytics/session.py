from __future__ import annotations

import uuid
from collections import deque
from typing import Deque, List, Mapping, Optional

from .errors import ValidationError
from .models import EventBuilder, EventRecord, Properties, PropertyValue

# Keys inside event properties that override the session identity for one record.
OVERRIDE_KEYS = ("user_id", "session_id")


def _generate_id() -> str:
    return str(uuid.uuid4())


class Session:
    """Stamps events with a shared user id, session id and user properties.

    Events pushed through the session accumulate in an internal FIFO buffer
    until the caller drains them with :meth:`take_events`.
    """

    def __init__(
        self,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
        user_properties: Optional[Mapping[str, PropertyValue]] = None,
    ) -> None:
        self._user_id = self._resolve_id("user_id", user_id)
        self._session_id = self._resolve_id("session_id", session_id)
        self._user_properties: Properties = dict(user_properties or {})
        self._events: Deque[EventRecord] = deque()

    @classmethod
    def new(cls, user_id: str, session_id: str) -> "Session":
        return cls(user_id=user_id, session_id=session_id)

    @classmethod
    def default(cls) -> "Session":
        return cls()

    @staticmethod
    def builder() -> "SessionBuilder":
        return SessionBuilder()

    @staticmethod
    def _resolve_id(label: str, value: Optional[str]) -> str:
        if value is None:
            return _generate_id()
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{label} must be a non-empty string")
        return value

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def user_properties(self) -> Properties:
        return dict(self._user_properties)

    def set_user_property(self, key: str, value: PropertyValue) -> None:
        self._user_properties[key] = value

    def set_user_properties(self, user_properties: Mapping[str, PropertyValue]) -> None:
        self._user_properties = dict(user_properties)

    def event(self, name: str) -> EventBuilder:
        """Return a builder pre-filled with this session's context."""
        return (
            EventBuilder()
            .event(name)
            .user_id(self._user_id)
            .session_id(self._session_id)
            .user_properties(self._user_properties)
        )

    def push_event(
        self,
        name: str,
        event_properties: Optional[Mapping[str, PropertyValue]] = None,
    ) -> EventRecord:
        properties = dict(event_properties or {})
        builder = self.event(name).event_properties(properties)
        overrides = self._identity_overrides(properties)
        if "user_id" in overrides:
            builder.user_id(overrides["user_id"])
        if "session_id" in overrides:
            builder.session_id(overrides["session_id"])
        record = builder.build()
        self._events.append(record)
        return record

    @staticmethod
    def _identity_overrides(properties: Mapping[str, PropertyValue]) -> dict:
        overrides = {}
        for key in OVERRIDE_KEYS:
            value = properties.get(key)
            if isinstance(value, str) and value.strip():
                overrides[key] = value
        return overrides

    def take_events(self, count: int) -> List[EventRecord]:
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValidationError("count must be a non-negative integer")
        taken: List[EventRecord] = []
        while self._events and len(taken) < count:
            taken.append(self._events.popleft())
        return taken

    def pending_events_count(self) -> int:
        return len(self._events)


class SessionBuilder:
    def __init__(self) -> None:
        self._user_id: Optional[str] = None
        self._session_id: Optional[str] = None
        self._user_properties: Properties = {}

    def user_id(self, user_id: str) -> "SessionBuilder":
        self._user_id = user_id
        return self

    def session_id(self, session_id: str) -> "SessionBuilder":
        self._session_id = session_id
        return self

    def user_properties(self, user_properties: Mapping[str, PropertyValue]) -> "SessionBuilder":
        self._user_properties = dict(user_properties)
        return self

    def build(self) -> Session:
        return Session(
            user_id=self._user_id,
            session_id=self._session_id,
            user_properties=self._user_properties,
        )
