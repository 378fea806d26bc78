"""In-process identity provider.

Holds the current session in memory and fans sign-in/sign-out events out to
registered listeners. Credentials live in the ``users`` table.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from sqlalchemy.orm import sessionmaker

from notekeep.auth.models import Identity
from notekeep.auth.service import authenticate_user, register_user

logger = logging.getLogger(__name__)

AuthListener = Callable[[Optional[Identity]], None]


class LocalAuthProvider:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._current: Optional[Identity] = None
        self._listeners: List[AuthListener] = []

    @property
    def current_user(self) -> Optional[Identity]:
        return self._current

    async def sign_up(self, email: str, password: str) -> Identity:
        with self._session_factory() as db:
            ident = register_user(db, email, password)
        self._set(ident)
        return ident

    async def sign_in(self, email: str, password: str) -> Identity:
        with self._session_factory() as db:
            ident = authenticate_user(db, email, password)
        self._set(ident)
        return ident

    async def sign_out(self) -> None:
        self._set(None)

    def on_auth_state_changed(self, callback: AuthListener) -> Callable[[], None]:
        """Register `callback`; it fires now with the current state and on every change."""
        self._listeners.append(callback)
        callback(self._current)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set(self, ident: Optional[Identity]) -> None:
        self._current = ident
        logger.info("auth state changed: %s", ident.id if ident else "signed out")
        for cb in list(self._listeners):
            cb(ident)
