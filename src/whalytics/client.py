from __future__ import annotations

import json
import os
from typing import Dict, Iterable, List, Optional

import requests

from .errors import TransportError, ValidationError
from .logger import DeliveryLog
from .models import EventRecord

DEFAULT_BACKEND_URL = "https://analytics.whaleboxstudio.com/v1/events"
NO_EVENTS_MESSAGE = "No events to send"

API_KEY_ENV = "WHALYTICS_API_KEY"
BACKEND_URL_ENV = "WHALYTICS_BACKEND_URL"


class Client:
    """Buffers events and uploads them as JSON batches.

    Nothing is sent until :meth:`flush` or :meth:`flush_batch` is called, and
    a failed send leaves the buffer exactly as it was so the caller can retry.
    """

    def __init__(
        self,
        api_key: str,
        backend_url: str = DEFAULT_BACKEND_URL,
        *,
        timeout: int = 30,
        http_session: Optional[requests.Session] = None,
        log: Optional[DeliveryLog] = None,
    ) -> None:
        if not isinstance(api_key, str) or not api_key.strip():
            raise ValidationError("api_key is required")
        if not isinstance(backend_url, str) or not backend_url.strip():
            raise ValidationError("backend_url must be a non-empty string")
        self._api_key = api_key
        self._backend_url = backend_url
        self.timeout = timeout
        self.http_session = http_session or requests.Session()
        self.log = log or DeliveryLog()
        self._events: List[EventRecord] = []

    @classmethod
    def new(cls, api_key: str) -> "Client":
        return cls(api_key)

    @staticmethod
    def builder() -> "ClientBuilder":
        return ClientBuilder()

    @classmethod
    def from_env(cls, **kwargs) -> "Client":
        return ClientBuilder().from_env().build(**kwargs)

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def backend_url(self) -> str:
        return self._backend_url

    @property
    def delivery_log(self) -> List[str]:
        return self.log.entries

    def log_event(self, record: EventRecord) -> None:
        self._events.append(record)

    def log_events(self, records: Iterable[EventRecord]) -> None:
        for record in records:
            self.log_event(record)

    def pending_events_count(self) -> int:
        return len(self._events)

    def flush(self) -> str:
        return self._send_prefix(len(self._events))

    def flush_batch(self, batch_size: int) -> str:
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
            raise ValidationError("batch_size must be a positive integer")
        return self._send_prefix(min(batch_size, len(self._events)))

    def _send_prefix(self, count: int) -> str:
        if count == 0:
            return NO_EVENTS_MESSAGE
        batch = self._events[:count]
        try:
            response_text = self._post(batch)
        except TransportError as exc:
            self.log.log("error", f"{len(batch)} events kept: {exc}")
            raise
        del self._events[:count]
        self.log.log("flush", f"sent {len(batch)} events, {len(self._events)} pending")
        return response_text

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def _post(self, batch: List[EventRecord]) -> str:
        try:
            body = json.dumps([record.to_payload() for record in batch], allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise TransportError(f"Could not serialize events: {exc}") from exc
        try:
            response = self.http_session.post(
                self._backend_url,
                headers=self._headers(),
                data=body,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"Request to {self._backend_url} failed: {exc}") from exc
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise TransportError(
                f"Backend rejected batch with status {response.status_code}",
                status_code=response.status_code,
                response_text=response.text,
            ) from exc
        return response.text

    def close(self) -> None:
        self.http_session.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class ClientBuilder:
    def __init__(self) -> None:
        self._api_key: Optional[str] = None
        self._backend_url: Optional[str] = None
        self._timeout: Optional[int] = None
        self._http_session: Optional[requests.Session] = None

    def api_key(self, api_key: str) -> "ClientBuilder":
        self._api_key = api_key
        return self

    def backend_url(self, backend_url: str) -> "ClientBuilder":
        self._backend_url = backend_url
        return self

    def timeout(self, seconds: int) -> "ClientBuilder":
        self._timeout = seconds
        return self

    def http_session(self, session: requests.Session) -> "ClientBuilder":
        self._http_session = session
        return self

    def from_env(self) -> "ClientBuilder":
        # explicit values set on the builder win over the environment
        api_key = os.getenv(API_KEY_ENV)
        if api_key and self._api_key is None:
            self._api_key = api_key
        backend_url = os.getenv(BACKEND_URL_ENV)
        if backend_url and self._backend_url is None:
            self._backend_url = backend_url
        return self

    def build(self, **kwargs) -> Client:
        if self._api_key is None:
            raise ValidationError("api_key is required")
        if self._timeout is not None:
            kwargs.setdefault("timeout", self._timeout)
        if self._http_session is not None:
            kwargs.setdefault("http_session", self._http_session)
        return Client(
            self._api_key,
            DEFAULT_BACKEND_URL if self._backend_url is None else self._backend_url,
            **kwargs,
        )
