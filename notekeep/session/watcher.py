from __future__ import annotations

import logging
from typing import Callable, Optional

from notekeep.auth.models import Identity
from notekeep.auth.provider import AuthListener, LocalAuthProvider

logger = logging.getLogger(__name__)


class SessionWatcher:
    """Single registration against the auth provider's session-change events.

    A watcher registers once; after `stop()` it cannot be started again.
    Clearing any cached collection view on sign-out is the caller's job.
    """

    def __init__(self, provider: LocalAuthProvider):
        self._provider = provider
        self._release: Optional[Callable[[], None]] = None
        self._stopped = False

    @property
    def active(self) -> bool:
        return self._release is not None

    @property
    def current(self) -> Optional[Identity]:
        return self._provider.current_user

    def start(self, callback: AuthListener) -> Callable[[], None]:
        if self._release is not None:
            raise RuntimeError("session watcher already started")
        if self._stopped:
            raise RuntimeError("session watcher was stopped")
        self._release = self._provider.on_auth_state_changed(callback)
        return self.stop

    def stop(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            self._stopped = True
            release()
            logger.debug("session watcher stopped")
