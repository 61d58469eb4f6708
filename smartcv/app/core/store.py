# smartcv/app/core/store.py

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional, Set

from smartcv.app.config import Settings, settings as default_settings
from smartcv.app.core.adapters import BlobStorageAdapter, InferenceAdapter, KeyValueAdapter
from smartcv.app.core.gate import CapabilityGate
from smartcv.app.core.session import Session, SessionMachine
from smartcv.app.platform.client import Platform

logger = logging.getLogger(__name__)

PLATFORM_UNAVAILABLE = "platform unavailable"

StateListener = Callable[["StoreState"], None]


@dataclass(frozen=True)
class StoreState:
    is_loading: bool = True
    last_error: Optional[str] = None
    capabilities_ready: bool = False
    session: Session = field(default_factory=Session.signed_out)

    def __post_init__(self):
        if self.last_error is not None and (self.is_loading or self.session.authenticated):
            raise ValueError("An errored state must be idle and signed out")


class PlatformStore:
    """Process-wide state container over the platform's capabilities.

    Built once by the application boundary and handed to whoever needs it. State is
    an immutable StoreState swapped whole by `update()`, so a change to one field
    never drops another. Capabilities are reached through `auth`, `fs`, `ai`, `kv`.
    """

    def __init__(self, probe: Callable[[], Optional[Platform]], settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self._probe = probe
        self._state = StoreState()
        self._listeners: List[StateListener] = []
        self._background: Set[asyncio.Task] = set()

        self.gate = CapabilityGate(
            probe,
            on_ready=self._on_capabilities_ready,
            on_timeout=self._on_capabilities_timeout,
            interval=self.settings.PLATFORM_POLL_INTERVAL,
            deadline=self.settings.PLATFORM_READY_TIMEOUT,
        )
        self.auth = SessionMachine(self)
        self.fs = BlobStorageAdapter(self)
        self.ai = InferenceAdapter(self, feedback_model=self.settings.feedback_model_id())
        self.kv = KeyValueAdapter(self)

    # ---------- State ----------
    @property
    def state(self) -> StoreState:
        return self._state

    def update(self, **changes: Any) -> StoreState:
        new_state = replace(self._state, **changes)
        if new_state == self._state:
            return self._state
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    def set_error(self, message: str) -> None:
        self.update(last_error=message, is_loading=False, session=Session.signed_out())

    def set_unavailable(self) -> str:
        self.set_error(PLATFORM_UNAVAILABLE)
        return PLATFORM_UNAVAILABLE

    def clear_error(self) -> None:
        self.update(last_error=None)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---------- Platform ----------
    def platform(self) -> Optional[Platform]:
        """The platform client, or None until the gate has seen it."""
        if not self._state.capabilities_ready:
            return None
        return self._probe()

    def init(self) -> None:
        self.gate.start()

    async def wait_until_ready(self) -> bool:
        """Wait for the gate to settle and for the first session check to finish."""
        ready = await self.gate.wait()
        if self._background:
            await asyncio.gather(*list(self._background))
        return ready

    def _on_capabilities_ready(self) -> None:
        logger.info("Platform capabilities ready")
        self.update(capabilities_ready=True)
        task = asyncio.get_running_loop().create_task(self.auth.check_status())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _on_capabilities_timeout(self) -> None:
        self.set_error(PLATFORM_UNAVAILABLE)
