"""Explicit auth session object for API consumers.

Instead of module-level state, callers hold an :class:`AuthSession` and pass
it to whatever needs the current identity. Every change goes through one of
the mutators below and is announced to subscribers as a :class:`SessionEvent`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

from monogram.permissions import UserRole

log = structlog.get_logger(__name__)


class SessionEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


@dataclass(frozen=True)
class Profile:
    id: str
    email: str
    name: str
    role: UserRole


Listener = Callable[[SessionEvent, "AuthSession"], None]


class AuthSession:
    def __init__(self) -> None:
        self.access_token: str | None = None
        self.refresh_token: str | None = None
        self.profile: Profile | None = None
        self._listeners: list[Listener] = []

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def sign_in(self, access_token: str, refresh_token: str, profile: Profile | None = None) -> None:
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.profile = profile
        self._emit(SessionEvent.SIGNED_IN)

    def token_refreshed(self, access_token: str, refresh_token: str) -> None:
        self.access_token = access_token
        self.refresh_token = refresh_token
        self._emit(SessionEvent.TOKEN_REFRESHED)

    def update_profile(self, profile: Profile) -> None:
        self.profile = profile
        self._emit(SessionEvent.USER_UPDATED)

    def sign_out(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.profile = None
        self._emit(SessionEvent.SIGNED_OUT)

    def _emit(self, event: SessionEvent) -> None:
        log.debug("session_event", event=event.value, listeners=len(self._listeners))
        for listener in list(self._listeners):
            listener(event, self)
