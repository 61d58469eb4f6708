#smartcv/app/main.py

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smartcv.app.api.routes import api_router
from smartcv.app.config import Settings, settings as default_settings
from smartcv.app.core.store import PlatformStore
from smartcv.app.platform.client import Platform
from smartcv.app.platform.loader import PlatformLoader


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


class SmartCVApp:
    """ASGI app that owns the single PlatformStore for the process.

    `probe` replaces the network platform loader (used by tests and embedders that
    already hold a platform client).
    """

    def __init__(self, settings: Optional[Settings] = None, probe: Optional[Callable[[], Optional[Platform]]] = None):
        self.settings = settings or default_settings
        self._probe = probe
        self.app = FastAPI(
            title="Smart CV API",
            description="Resume feedback against a target job, powered by an AI model.",
            version="0.3.0",
            lifespan=self._lifespan,
        )
        self._configure_cors()
        self.include_routers()

    def _configure_cors(self):
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=self.settings.cors_origins(),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def include_routers(self):
        self.app.include_router(api_router)

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        loader = None
        probe = self._probe
        if probe is None:
            loader = PlatformLoader(self.settings)
            loader.start()
            probe = loader.current

        store = PlatformStore(probe, settings=self.settings)
        app.state.store = store
        app.state.settings = self.settings
        store.init()
        await store.wait_until_ready()
        try:
            yield
        finally:
            store.gate.cancel()
            if loader is not None:
                await loader.aclose()


def get_app():
    """Entrypoint for ASGI"""
    configure_logging(default_settings.LOG_LEVEL)
    return SmartCVApp().app

# Run with 'uvicorn smartcv.app.main:app'
app = get_app()
