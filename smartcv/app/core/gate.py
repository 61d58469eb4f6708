# smartcv/app/core/gate.py

import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class CapabilityGate:
    """Waits for the platform client to become observable.

    `probe()` returns the platform (or any truthy handle) once it is present.
    `start()` checks right away and, if the platform is missing, polls every
    `interval` seconds until it shows up or `deadline` seconds pass. The poll and
    the deadline are separate timer handles; both are cleared on either outcome, and
    `start()` never schedules a second pair while one is outstanding.
    """

    def __init__(
        self,
        probe: Callable[[], Any],
        on_ready: Callable[[], None],
        on_timeout: Callable[[], None],
        interval: float = 0.1,
        deadline: float = 10.0,
    ):
        self._probe = probe
        self._on_ready = on_ready
        self._on_timeout = on_timeout
        self.interval = interval
        self.deadline = deadline
        self._poll_handle: Optional[asyncio.TimerHandle] = None
        self._deadline_handle: Optional[asyncio.TimerHandle] = None
        self._settled: Optional[asyncio.Future] = None

    @property
    def pending(self) -> bool:
        return self._poll_handle is not None or self._deadline_handle is not None

    def start(self) -> None:
        if self.pending:
            logger.debug("Capability gate already waiting; ignoring start()")
            return

        loop = asyncio.get_running_loop()
        self._settled = loop.create_future()

        if self._probe():
            self._settle(True)
            return

        logger.info("Platform not available yet; polling every %.2fs for up to %.1fs", self.interval, self.deadline)
        self._poll_handle = loop.call_later(self.interval, self._poll)
        self._deadline_handle = loop.call_later(self.deadline, self._expire)

    async def wait(self) -> bool:
        """Block until the current wait settles. Returns True when the platform became ready."""
        if self._settled is None:
            return False
        return await asyncio.shield(self._settled)

    def cancel(self) -> None:
        if self._poll_handle is not None:
            self._poll_handle.cancel()
            self._poll_handle = None
        if self._deadline_handle is not None:
            self._deadline_handle.cancel()
            self._deadline_handle = None

    def _poll(self) -> None:
        self._poll_handle = None
        if self._probe():
            self._settle(True)
            return
        self._poll_handle = asyncio.get_running_loop().call_later(self.interval, self._poll)

    def _expire(self) -> None:
        self._deadline_handle = None
        self._settle(bool(self._probe()))

    def _settle(self, ready: bool) -> None:
        self.cancel()
        if self._settled is not None and not self._settled.done():
            self._settled.set_result(ready)
        if ready:
            self._on_ready()
        else:
            logger.error("Platform did not become available within %.1fs", self.deadline)
            self._on_timeout()
