#smartcv/app/models/platform_models.py

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """User record returned by the platform. Unknown attributes are kept as-is."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., validation_alias=AliasChoices("id", "uuid"))
    username: Optional[str] = None


class FSItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    path: str
    uid: Optional[str] = None
    is_dir: bool = False
    size: Optional[int] = None
    created: Optional[int] = None
    modified: Optional[int] = None


class KVItem(BaseModel):
    key: str
    value: str


class ChatMessage(BaseModel):
    role: str = Field(..., description="One of: user, assistant, system")
    content: Union[str, List[Dict[str, Any]]]


@dataclass(frozen=True)
class Document:
    """A file handed to the platform's blob storage."""
    name: str
    content: bytes
    content_type: str = "application/pdf"


# ---------- Inference response content ----------

class ResponseShapeError(ValueError):
    """Raised when an inference response carries content we do not know how to read."""


class TextContent(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class PartsContent(BaseModel):
    kind: Literal["parts"] = "parts"
    parts: List[Any]


ResponseContent = Union[TextContent, PartsContent]


def classify_content(raw: Any) -> ResponseContent:
    if isinstance(raw, str):
        return TextContent(text=raw)
    if isinstance(raw, list):
        return PartsContent(parts=raw)
    raise ResponseShapeError(f"Unsupported response content type: {type(raw).__name__}")


def extract_text(content: ResponseContent) -> str:
    """Return the text an inference response carries: the string itself, or the first part's `text`."""
    if isinstance(content, TextContent):
        return content.text
    if isinstance(content, PartsContent):
        if not content.parts:
            raise ResponseShapeError("Response content list is empty")
        first = content.parts[0]
        text = first.get("text") if isinstance(first, dict) else None
        if not isinstance(text, str):
            raise ResponseShapeError("First response content part carries no text")
        return text
    raise ResponseShapeError(f"Unknown response content kind: {content!r}")


class ChatResponseMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str = "assistant"
    content: Any = None


class AIResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    index: int = 0
    message: ChatResponseMessage
    finish_reason: Optional[str] = None
    usage: Optional[Any] = None

    def content(self) -> ResponseContent:
        return classify_content(self.message.content)
