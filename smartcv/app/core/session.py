# smartcv/app/core/session.py

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from smartcv.app.models.platform_models import Identity
from smartcv.app.platform.client import Platform, PlatformError

if TYPE_CHECKING:
    from smartcv.app.core.store import PlatformStore

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Session:
    status: SessionStatus = SessionStatus.UNAUTHENTICATED
    identity: Optional[Identity] = None

    def __post_init__(self):
        if (self.status is SessionStatus.AUTHENTICATED) != (self.identity is not None):
            raise ValueError("An authenticated session needs an identity, and only then")

    @classmethod
    def signed_out(cls) -> "Session":
        return cls()

    @classmethod
    def signed_in(cls, identity: Identity) -> "Session":
        return cls(status=SessionStatus.AUTHENTICATED, identity=identity)

    @property
    def authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED


class SessionMachine:
    """Drives sign-in state against the platform's identity capability.

    Every operation marks the store as loading first; failures go through the
    store's error path, which also signs the session out.
    """

    def __init__(self, store: "PlatformStore"):
        self.store = store

    @property
    def is_authenticated(self) -> bool:
        return self.store.state.session.authenticated

    def get_identity(self) -> Optional[Identity]:
        return self.store.state.session.identity

    async def check_status(self) -> bool:
        platform = self._begin()
        if platform is None:
            return False
        try:
            if await platform.auth.is_signed_in():
                identity = await self._fetch_identity(platform)
                self._finish(Session.signed_in(identity))
                return True
            self._finish(Session.signed_out())
            return False
        except Exception as e:
            self._fail(e, "Failed to check authentication status")
            return False

    async def sign_in(self) -> None:
        platform = self._begin()
        if platform is None:
            return
        try:
            await platform.auth.sign_in()
        except Exception as e:
            self._fail(e, "Sign-in failed")
            return
        await self.check_status()

    async def sign_out(self) -> None:
        platform = self._begin()
        if platform is None:
            return
        try:
            await platform.auth.sign_out()
        except Exception as e:
            self._fail(e, "Sign-out failed")
            return
        self._finish(Session.signed_out())

    async def refresh(self) -> None:
        """Re-read the identity of the current session without a sign-in round trip."""
        platform = self._begin()
        if platform is None:
            return
        try:
            identity = await self._fetch_identity(platform)
        except Exception as e:
            self._fail(e, "Could not refresh the user")
            return
        self._finish(Session.signed_in(identity))

    # ---------- Helpers ----------
    def _begin(self) -> Optional[Platform]:
        platform = self.store.platform()
        if platform is None:
            self.store.set_unavailable()
            return None
        self.store.update(is_loading=True, last_error=None)
        return platform

    @staticmethod
    async def _fetch_identity(platform: Platform) -> Identity:
        identity = await platform.auth.get_user()
        if identity is None:
            raise PlatformError("Platform returned no user for the current session")
        return identity

    def _finish(self, session: Session) -> None:
        superseded = self.store.state.last_error
        if superseded is not None:
            logger.warning("Session update supersedes error recorded meanwhile: %s", superseded)
        self.store.update(session=session, is_loading=False, last_error=None)
        logger.info("Session is now %s", session.status.value)

    def _fail(self, error: Exception, fallback: str) -> None:
        message = str(error) or fallback
        logger.warning("%s: %s", fallback, message)
        self.store.set_error(message)
