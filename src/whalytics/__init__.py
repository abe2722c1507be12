"""Whalytics event SDK: build, buffer and batch-upload analytics events."""

from .client import DEFAULT_BACKEND_URL, Client, ClientBuilder
from .errors import TransportError, ValidationError
from .logger import DeliveryLog
from .models import EventBuilder, EventRecord
from .session import Session, SessionBuilder

__all__ = [
    "DEFAULT_BACKEND_URL",
    "Client",
    "ClientBuilder",
    "TransportError",
    "ValidationError",
    "DeliveryLog",
    "EventBuilder",
    "EventRecord",
    "Session",
    "SessionBuilder",
]
