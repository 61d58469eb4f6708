"""Shared pytest fixtures: an in-memory platform and stores built on it."""

from __future__ import annotations

import fnmatch
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import fitz
import pytest

# Ensure the application package is importable during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from smartcv.app.config import Settings  # noqa: E402
from smartcv.app.core.store import PlatformStore  # noqa: E402
from smartcv.app.models.platform_models import (  # noqa: E402
    AIResponse,
    ChatResponseMessage,
    FSItem,
    Identity,
    KVItem,
)
from smartcv.app.platform.client import Platform  # noqa: E402

SAMPLE_FEEDBACK = {
    "overallScore": 72,
    "ATS": {"score": 80, "tips": [{"type": "good", "tip": "Clear section headings"}]},
    "skills": {"score": 65, "tips": [{"type": "improve", "tip": "List Kubernetes", "explanation": "The job asks for it"}]},
}


class FakeAuth:
    def __init__(self):
        self.signed_in = True
        self.user: Optional[Identity] = Identity(id="u1", username="jane")
        self.error: Optional[Exception] = None
        self.calls: List[str] = []

    async def _maybe_fail(self, name: str) -> None:
        self.calls.append(name)
        if self.error is not None:
            raise self.error

    async def is_signed_in(self) -> bool:
        await self._maybe_fail("is_signed_in")
        return self.signed_in

    async def get_user(self) -> Optional[Identity]:
        await self._maybe_fail("get_user")
        return self.user

    async def sign_in(self) -> None:
        await self._maybe_fail("sign_in")
        self.signed_in = True

    async def sign_out(self) -> None:
        await self._maybe_fail("sign_out")
        self.signed_in = False


class FakeFileSystem:
    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.uploads: List[str] = []
        self.fail_upload_at: Optional[int] = None  # 1-based index of the upload that yields nothing

    async def write(self, path, data):
        self.files[path] = data.encode() if isinstance(data, str) else data
        return FSItem(id=path, name=path.rsplit("/", 1)[-1], path=path)

    async def read(self, path):
        return self.files[path]

    async def upload(self, documents):
        self.uploads.append(documents[0].name)
        if self.fail_upload_at == len(self.uploads):
            return None
        doc = documents[0]
        path = f"/jane/AppData/{doc.name}"
        self.files[path] = doc.content
        return FSItem(id=f"file-{len(self.uploads)}", name=doc.name, path=path, size=len(doc.content))

    async def delete(self, path):
        self.files.pop(path, None)

    async def readdir(self, path):
        return [FSItem(id=p, name=p.rsplit("/", 1)[-1], path=p) for p in self.files if p.startswith(path)]


class FakeAI:
    def __init__(self):
        self.content: Any = json.dumps(SAMPLE_FEEDBACK)
        self.return_none = False
        self.error: Optional[Exception] = None
        self.calls: List[Dict[str, Any]] = []

    async def chat(self, prompt, image_url=None, test_mode=False, options=None):
        self.calls.append({"prompt": prompt, "image_url": image_url, "test_mode": test_mode, "options": options})
        if self.error is not None:
            raise self.error
        if self.return_none:
            return None
        return AIResponse(message=ChatResponseMessage(content=self.content))

    async def img2txt(self, image, test_mode=False):
        return "Jane Doe"


class FakeKeyValue:
    def __init__(self):
        self.data: Dict[str, str] = {}
        self.set_calls: List[tuple] = []
        self.error: Optional[Exception] = None

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.set_calls.append((key, value))
        if self.error is not None:
            raise self.error
        self.data[key] = value
        return True

    async def delete(self, key):
        return self.data.pop(key, None) is not None

    async def list(self, pattern, return_values=False):
        keys = [k for k in sorted(self.data) if fnmatch.fnmatchcase(k, pattern)]
        if return_values:
            return [KVItem(key=k, value=self.data[k]) for k in keys]
        return keys

    async def flush(self):
        self.data.clear()
        return True


@pytest.fixture
def fake_platform() -> Platform:
    return Platform(auth=FakeAuth(), fs=FakeFileSystem(), ai=FakeAI(), kv=FakeKeyValue())


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        PLATFORM_POLL_INTERVAL=0.01,
        PLATFORM_READY_TIMEOUT=0.2,
        LLM_PROVIDER="openai",
        LLM_MODEL_NAME="gpt-4o-mini",
        FEEDBACK_MODEL_NAME="feedback-model",
        PDF_RENDER_SCALE=1.0,
    )


@pytest.fixture
def make_store(fake_platform, test_settings):
    """Build a store; by default its probe always sees `fake_platform`."""
    def _make(probe=None) -> PlatformStore:
        return PlatformStore(probe or (lambda: fake_platform), settings=test_settings)
    return _make


@pytest.fixture
def ready_store(make_store):
    """Async factory: a store whose gate has opened and whose first session check ran."""
    async def _ready(probe=None) -> PlatformStore:
        store = make_store(probe)
        store.init()
        await store.wait_until_ready()
        return store
    return _ready


@pytest.fixture
def sample_pdf() -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Jane Doe - Senior Engineer")
    data = doc.tobytes()
    doc.close()
    return data
