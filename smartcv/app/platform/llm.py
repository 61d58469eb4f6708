# smartcv/app/platform/llm.py

import base64
import logging
from typing import Any, Dict, List, Optional, Union

import litellm

from smartcv.app.config import Settings, settings as default_settings
from smartcv.app.core.pdf_parser import PDFParser
from smartcv.app.models.platform_models import AIResponse, ChatMessage, ChatResponseMessage
from smartcv.app.platform.client import FileSystemBackend

logger = logging.getLogger(__name__)

# Returned instead of a real completion when test_mode is set
TEST_MODE_REPLY = "This is a test-mode response. No model was called."
IMG2TXT_PROMPT = "Extract all text visible in this image. Reply with the extracted text only."


class LiteLLMInference:
    """AI capability backed by LiteLLM.

    `file` content parts (`{"type": "file", "path": ...}`) are resolved by reading
    the file from platform storage and inlining its text, so any chat model can
    review an uploaded resume.
    """

    def __init__(
        self,
        fs: FileSystemBackend,
        settings: Optional[Settings] = None,
        parser: Optional[PDFParser] = None,
    ):
        self.fs = fs
        self.settings = settings or default_settings
        self.parser = parser or PDFParser()

    async def chat(
        self,
        prompt: Union[str, List[ChatMessage]],
        image_url: Optional[str] = None,
        test_mode: bool = False,
        options: Optional[Dict[str, Any]] = None,
    ) -> Optional[AIResponse]:
        opts = dict(options or {})
        model_id = self.settings.full_model_id(opts.pop("model", None))
        messages = await self._build_messages(prompt, image_url)

        kwargs: Dict[str, Any] = dict(
            model=model_id,
            messages=messages,
            api_key=self.settings.LLM_API_KEY or None,
            api_base=self.settings.LLM_BASE_URL,
            timeout=self.settings.LLM_REQUEST_TIMEOUT,
            temperature=opts.pop("temperature", self.settings.LLM_TEMPERATURE),
        )
        kwargs.update(opts)
        if test_mode:
            kwargs["mock_response"] = TEST_MODE_REPLY

        logger.info("LLM chat model_id=%s messages=%d test_mode=%s", model_id, len(messages), test_mode)
        resp = await litellm.acompletion(**kwargs)
        return self._to_response(resp)

    async def img2txt(self, image: Union[str, bytes], test_mode: bool = False) -> Optional[str]:
        if isinstance(image, bytes):
            image = "data:image/png;base64," + base64.b64encode(image).decode("ascii")
        resp = await self.chat(IMG2TXT_PROMPT, image_url=image, test_mode=test_mode)
        if resp is None or not isinstance(resp.message.content, str):
            return None
        return resp.message.content

    # ---------- Helpers ----------
    async def _build_messages(
        self,
        prompt: Union[str, List[ChatMessage]],
        image_url: Optional[str],
    ) -> List[Dict[str, Any]]:
        if isinstance(prompt, str):
            if image_url:
                content: Any = [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ]
            else:
                content = prompt
            return [{"role": "user", "content": content}]

        messages = []
        for raw in prompt:
            msg = ChatMessage.model_validate(raw)
            if isinstance(msg.content, str):
                messages.append({"role": msg.role, "content": msg.content})
                continue
            parts = [await self._resolve_part(p) for p in msg.content]
            messages.append({"role": msg.role, "content": parts})
        return messages

    async def _resolve_part(self, part: Dict[str, Any]) -> Dict[str, Any]:
        if part.get("type") != "file":
            return part
        path = part.get("path") or ""
        data = await self.fs.read(path)
        text = self.parser.extract_any(data, name=path)
        return {"type": "text", "text": f"Contents of the file {path}:\n\n{text}"}

    @staticmethod
    def _to_response(resp: Any) -> Optional[AIResponse]:
        choices = getattr(resp, "choices", None) or []
        if not choices:
            return None
        choice = choices[0]
        message = choice.message
        usage = getattr(resp, "usage", None)
        if hasattr(usage, "model_dump"):
            usage = usage.model_dump()
        return AIResponse(
            index=getattr(choice, "index", 0) or 0,
            message=ChatResponseMessage(
                role=getattr(message, "role", None) or "assistant",
                content=message.content,
            ),
            finish_reason=getattr(choice, "finish_reason", None),
            usage=usage,
        )
