from __future__ import annotations

from collections import deque
from typing import Deque, List

from .errors import ValidationError

DEFAULT_MAX_ENTRIES = 200


class DeliveryLog:
    """Keeps the most recent flush outcomes as console-like entries.

    Only the last ``max_entries`` entries are retained, so a long-lived
    client never grows its log beyond that bound.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValidationError("max_entries must be positive")
        self._entries: Deque[str] = deque(maxlen=max_entries)

    def log(self, channel: str, message: str) -> None:
        self._entries.append(f"> [{channel}] {message}")

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen

    @property
    def entries(self) -> List[str]:
        return list(self._entries)
