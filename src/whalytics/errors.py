from __future__ import annotations

from typing import Optional


class ValidationError(ValueError):
    """Raised when an event, session or client is missing required fields."""


class TransportError(RuntimeError):
    """Raised when a batch could not be delivered to the ingestion endpoint."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        response_text: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text
