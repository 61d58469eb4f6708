# smartcv/app/core/adapters.py

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, TypeVar, Union

from smartcv.app.core.result import Ok, Result, Unavailable
from smartcv.app.models.platform_models import AIResponse, ChatMessage, Document, FSItem, KVItem
from smartcv.app.platform.client import Platform

if TYPE_CHECKING:
    from smartcv.app.core.store import PlatformStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_present(value: Any) -> bool:
    return value is not None


class CapabilityAdapter:
    """Base for the capability wrappers.

    `_call` runs one platform call and turns every outcome into a Result: a missing
    platform, a raised error or an unusable value all record `last_error` on the
    store and come back as `Unavailable`. Nothing is retried here.
    """

    capability = "platform"

    def __init__(self, store: "PlatformStore"):
        self.store = store

    async def _call(
        self,
        operation: str,
        call: Callable[[Platform], Awaitable[T]],
        usable: Callable[[Any], bool] = _is_present,
    ) -> Result[T]:
        platform = self.store.platform()
        if platform is None:
            return Unavailable(self.store.set_unavailable())

        name = f"{self.capability}.{operation}"
        try:
            value = await call(platform)
        except Exception as e:
            message = str(e) or f"{name} failed"
            logger.warning("%s failed: %s", name, message)
            self.store.set_error(message)
            return Unavailable(message)

        if not usable(value):
            message = f"{name} returned no result"
            logger.warning(message)
            self.store.set_error(message)
            return Unavailable(message)
        return Ok(value)


class BlobStorageAdapter(CapabilityAdapter):
    capability = "fs"

    async def write(self, path: str, data: Union[str, bytes]) -> Result[FSItem]:
        return await self._call("write", lambda p: p.fs.write(path, data))

    async def read(self, path: str) -> Result[bytes]:
        return await self._call("read", lambda p: p.fs.read(path))

    async def upload(self, documents: List[Document]) -> Result[FSItem]:
        return await self._call("upload", lambda p: p.fs.upload(documents))

    async def delete(self, path: str) -> Result[None]:
        return await self._call("delete", lambda p: p.fs.delete(path), usable=lambda _: True)

    async def read_dir(self, path: str) -> Result[List[FSItem]]:
        return await self._call("readdir", lambda p: p.fs.readdir(path))


class InferenceAdapter(CapabilityAdapter):
    capability = "ai"

    def __init__(self, store: "PlatformStore", feedback_model: Optional[str] = None):
        super().__init__(store)
        self.feedback_model = feedback_model

    async def chat(
        self,
        prompt: Union[str, List[ChatMessage]],
        image_url: Optional[str] = None,
        test_mode: bool = False,
        options: Optional[Dict[str, Any]] = None,
    ) -> Result[AIResponse]:
        return await self._call("chat", lambda p: p.ai.chat(prompt, image_url, test_mode, options))

    async def feedback(self, path: str, message: str) -> Result[AIResponse]:
        """Ask the model about a stored file: one user message with the file and the instruction."""
        messages = [
            ChatMessage(
                role="user",
                content=[
                    {"type": "file", "path": path},
                    {"type": "text", "text": message},
                ],
            )
        ]
        options = {"model": self.feedback_model} if self.feedback_model else None
        return await self.chat(messages, options=options)

    async def img2txt(self, image: Union[str, bytes], test_mode: bool = False) -> Result[str]:
        return await self._call("img2txt", lambda p: p.ai.img2txt(image, test_mode))


class KeyValueAdapter(CapabilityAdapter):
    capability = "kv"

    async def get(self, key: str) -> Result[Optional[str]]:
        # a missing key is a valid answer
        return await self._call("get", lambda p: p.kv.get(key), usable=lambda _: True)

    async def set(self, key: str, value: str) -> Result[bool]:
        return await self._call("set", lambda p: p.kv.set(key, value), usable=bool)

    async def delete(self, key: str) -> Result[bool]:
        return await self._call("delete", lambda p: p.kv.delete(key))

    async def list(self, pattern: str, return_values: bool = False) -> Result[Union[List[str], List[KVItem]]]:
        return await self._call("list", lambda p: p.kv.list(pattern, return_values))

    async def flush(self) -> Result[bool]:
        return await self._call("flush", lambda p: p.kv.flush(), usable=bool)
