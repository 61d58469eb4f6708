# smartcv/app/platform/loader.py

import asyncio
import logging
from typing import Optional

import httpx

from smartcv.app.config import Settings
from smartcv.app.platform.client import Platform
from smartcv.app.platform.http import HttpAuth, HttpFileSystem, HttpKeyValue, PlatformHttpSession
from smartcv.app.platform.llm import LiteLLMInference

logger = logging.getLogger(__name__)


def build_platform(session: PlatformHttpSession, settings: Settings) -> Platform:
    fs = HttpFileSystem(session)
    return Platform(
        auth=HttpAuth(session),
        fs=fs,
        ai=LiteLLMInference(fs, settings=settings),
        kv=HttpKeyValue(session),
    )


class PlatformLoader:
    """Connects to the platform in the background.

    `current()` is the presence probe: it returns None until the platform answered
    its health check, then the assembled `Platform`.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport
        self._platform: Optional[Platform] = None
        self._session: Optional[PlatformHttpSession] = None
        self._task: Optional[asyncio.Task] = None

    def current(self) -> Optional[Platform]:
        return self._platform

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._connect())

    async def _connect(self) -> None:
        session = PlatformHttpSession(
            self.settings.PLATFORM_BASE_URL,
            api_token=self.settings.PLATFORM_API_TOKEN,
            timeout=self.settings.PLATFORM_REQUEST_TIMEOUT,
            transport=self._transport,
        )
        # aclose() releases it if cancelled mid-retry
        self._session = session
        for attempt in range(1, self.settings.PLATFORM_CONNECT_ATTEMPTS + 1):
            if await session.ping():
                self._platform = build_platform(session, self.settings)
                logger.info("Connected to platform at %s (attempt %d)", self.settings.PLATFORM_BASE_URL, attempt)
                return
            logger.warning("Platform at %s not reachable (attempt %d)", self.settings.PLATFORM_BASE_URL, attempt)
            await asyncio.sleep(self.settings.PLATFORM_CONNECT_BACKOFF)

        logger.error("Giving up on platform at %s", self.settings.PLATFORM_BASE_URL)
        self._session = None
        await session.aclose()

    async def aclose(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        if self._session is not None:
            await self._session.aclose()
            self._session = None
        self._platform = None
