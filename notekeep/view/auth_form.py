from __future__ import annotations

import logging
from enum import Enum

from notekeep.auth.messages import friendly_auth_message
from notekeep.auth.provider import LocalAuthProvider
from notekeep.auth.service import AuthProviderError

logger = logging.getLogger(__name__)


class AuthMode(str, Enum):
    LOGIN = "login"
    SIGNUP = "signup"


class AuthForm:
    """Sign-in / sign-up form state. Success is observed through the session watcher."""

    def __init__(self, provider: LocalAuthProvider):
        self._provider = provider
        self.mode = AuthMode.LOGIN
        self.error = ""
        self.loading = False

    def toggle_mode(self) -> AuthMode:
        self.mode = AuthMode.SIGNUP if self.mode is AuthMode.LOGIN else AuthMode.LOGIN
        self.error = ""
        return self.mode

    async def submit(self, email: str, password: str) -> bool:
        self.error = ""
        self.loading = True
        try:
            if self.mode is AuthMode.LOGIN:
                await self._provider.sign_in(email, password)
            else:
                await self._provider.sign_up(email, password)
            return True
        except AuthProviderError as e:
            self.error = friendly_auth_message(e.code)
            return False
        except Exception:
            logger.exception("Unexpected auth failure")
            self.error = friendly_auth_message(None)
            return False
        finally:
            self.loading = False
