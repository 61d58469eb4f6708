# smartcv/app/platform/http.py

import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from smartcv.app.models.platform_models import Document, FSItem, Identity, KVItem
from smartcv.app.platform.client import PlatformError

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Token"


class PlatformHttpSession:
    """Shared httpx client for the platform's REST surface."""

    def __init__(
        self,
        base_url: str,
        api_token: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Authorization": f"Bearer {api_token}"} if api_token else {}
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        resp = await self.client.request(method, url, **kwargs)
        resp.raise_for_status()
        return resp

    async def json(self, method: str, url: str, **kwargs) -> Any:
        resp = await self.request(method, url, **kwargs)
        if not resp.content:
            return None
        return resp.json()

    async def ping(self) -> bool:
        try:
            resp = await self.client.get("/health")
        except httpx.HTTPError as e:
            logger.debug("Platform health check failed: %s", e)
            return False
        return resp.status_code == 200

    def set_session_token(self, token: Optional[str]) -> None:
        if token:
            self.client.headers[SESSION_HEADER] = token
        else:
            self.client.headers.pop(SESSION_HEADER, None)

    async def aclose(self) -> None:
        await self.client.aclose()


class HttpAuth:
    def __init__(self, session: PlatformHttpSession):
        self.session = session

    async def is_signed_in(self) -> bool:
        data = await self.session.json("GET", "/auth/session") or {}
        return bool(data.get("signed_in"))

    async def get_user(self) -> Identity:
        data = await self.session.json("GET", "/auth/user")
        if not data:
            raise PlatformError("Platform returned no user for the current session")
        return Identity.model_validate(data)

    async def sign_in(self) -> None:
        data = await self.session.json("POST", "/auth/sign-in") or {}
        token = data.get("token")
        if not token:
            raise PlatformError("Sign-in did not return a session token")
        self.session.set_session_token(token)

    async def sign_out(self) -> None:
        await self.session.request("POST", "/auth/sign-out")
        self.session.set_session_token(None)


class HttpFileSystem:
    def __init__(self, session: PlatformHttpSession):
        self.session = session

    async def write(self, path: str, data: Union[str, bytes]) -> Optional[FSItem]:
        body = data.encode("utf-8") if isinstance(data, str) else data
        item = await self.session.json("POST", "/fs/write", params={"path": path}, content=body)
        return FSItem.model_validate(item) if item else None

    async def read(self, path: str) -> bytes:
        resp = await self.session.request("GET", "/fs/read", params={"path": path})
        return resp.content

    async def upload(self, documents: List[Document]) -> Optional[FSItem]:
        files = [("files", (d.name, d.content, d.content_type)) for d in documents]
        item = await self.session.json("POST", "/fs/upload", files=files)
        # multi-file uploads answer with a list; the first item is the one we asked about
        if isinstance(item, list):
            item = item[0] if item else None
        return FSItem.model_validate(item) if item else None

    async def delete(self, path: str) -> None:
        await self.session.request("DELETE", "/fs/delete", params={"path": path})

    async def readdir(self, path: str) -> Optional[List[FSItem]]:
        items = await self.session.json("GET", "/fs/readdir", params={"path": path})
        if items is None:
            return None
        return [FSItem.model_validate(i) for i in items]


class HttpKeyValue:
    def __init__(self, session: PlatformHttpSession):
        self.session = session

    async def get(self, key: str) -> Optional[str]:
        data = await self.session.json("GET", "/kv/get", params={"key": key}) or {}
        return data.get("value")

    async def set(self, key: str, value: str) -> bool:
        return self._ok(await self.session.json("POST", "/kv/set", json={"key": key, "value": value}))

    async def delete(self, key: str) -> bool:
        return self._ok(await self.session.json("POST", "/kv/delete", json={"key": key}))

    async def list(self, pattern: str, return_values: bool = False) -> Union[List[str], List[KVItem]]:
        params = {"pattern": pattern, "return_values": str(return_values).lower()}
        data = await self.session.json("GET", "/kv/list", params=params) or {}
        items = data.get("items") or []
        if return_values:
            return [KVItem.model_validate(i) for i in items]
        return [str(i) for i in items]

    async def flush(self) -> bool:
        return self._ok(await self.session.json("POST", "/kv/flush"))

    @staticmethod
    def _ok(data: Optional[Dict[str, Any]]) -> bool:
        return bool((data or {}).get("ok"))
