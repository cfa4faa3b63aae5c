"""Python client for the barbershop API: session handling, cached data and page logic."""
from __future__ import annotations

from .context import DataContext
from .notifications import Notifier
from .session import ApiClient, ApiRequestError, Session, SessionStore

__all__ = [
    "ApiClient",
    "ApiRequestError",
    "DataContext",
    "Notifier",
    "Session",
    "SessionStore",
]
