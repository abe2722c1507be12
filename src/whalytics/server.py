"""FastAPI collector accepting Whalytics batches for local development."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel, Field

from .client import API_KEY_ENV
from .errors import ValidationError
from .models import EventRecord


class EventPayload(BaseModel):
    event: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    time: int = Field(..., ge=0)
    event_properties: Dict[str, Any] = Field(default_factory=dict)
    user_properties: Dict[str, Any] = Field(default_factory=dict)


class IngestResponse(BaseModel):
    status: str
    received: int


class EventStore:
    """In-memory list of received events, kept in arrival order."""

    def __init__(self) -> None:
        self._events: List[EventRecord] = []

    def add_batch(self, payloads: List[EventPayload]) -> int:
        for payload in payloads:
            self._events.append(EventRecord.from_payload(payload.model_dump()))
        return len(payloads)

    @property
    def events(self) -> List[EventRecord]:
        return list(self._events)


def create_app(
    api_key: Optional[str] = None, store: Optional[EventStore] = None
) -> FastAPI:
    api_key = api_key or os.getenv(API_KEY_ENV)
    if not api_key:
        raise ValidationError("collector api key is required")
    app = FastAPI(
        title="Whalytics Collector",
        version="1.0.0",
        description="Development endpoint for the Whalytics event SDK.",
    )
    app.state.store = store or EventStore()

    def _authorize(authorization: Optional[str]) -> None:
        if authorization != f"Bearer {api_key}":
            raise HTTPException(status_code=401, detail="invalid api key")

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/v1/events", response_model=IngestResponse)
    def ingest_events(
        events: List[EventPayload],
        authorization: Optional[str] = Header(default=None),
    ) -> IngestResponse:
        _authorize(authorization)
        received = app.state.store.add_batch(events)
        return IngestResponse(status="accepted", received=received)

    @app.get("/v1/events")
    def list_events(
        authorization: Optional[str] = Header(default=None),
    ) -> List[Dict[str, Any]]:
        _authorize(authorization)
        return [record.to_payload() for record in app.state.store.events]

    return app
