# smartcv/app/platform/client.py

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Union

from smartcv.app.models.platform_models import (
    AIResponse,
    ChatMessage,
    Document,
    FSItem,
    Identity,
    KVItem,
)


class PlatformError(RuntimeError):
    """A platform capability call failed."""


class AuthBackend(Protocol):
    async def is_signed_in(self) -> bool: ...
    async def get_user(self) -> Identity: ...
    async def sign_in(self) -> None: ...
    async def sign_out(self) -> None: ...


class FileSystemBackend(Protocol):
    async def write(self, path: str, data: Union[str, bytes]) -> Optional[FSItem]: ...
    async def read(self, path: str) -> bytes: ...
    async def upload(self, documents: List[Document]) -> Optional[FSItem]: ...
    async def delete(self, path: str) -> None: ...
    async def readdir(self, path: str) -> Optional[List[FSItem]]: ...


class AIBackend(Protocol):
    async def chat(
        self,
        prompt: Union[str, List[ChatMessage]],
        image_url: Optional[str] = None,
        test_mode: bool = False,
        options: Optional[Dict[str, Any]] = None,
    ) -> Optional[AIResponse]: ...
    async def img2txt(self, image: Union[str, bytes], test_mode: bool = False) -> Optional[str]: ...


class KeyValueBackend(Protocol):
    async def get(self, key: str) -> Optional[str]: ...
    async def set(self, key: str, value: str) -> bool: ...
    async def delete(self, key: str) -> bool: ...
    async def list(self, pattern: str, return_values: bool = False) -> Union[List[str], List[KVItem]]: ...
    async def flush(self) -> bool: ...


@dataclass
class Platform:
    """The four capability groups the application consumes."""
    auth: AuthBackend
    fs: FileSystemBackend
    ai: AIBackend
    kv: KeyValueBackend
