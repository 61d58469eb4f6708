# smartcv/app/config.py

from typing import Optional
from pydantic import BaseModel, Field
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    # LLM config
    LLM_PROVIDER: str = Field(default=os.getenv("LLM_PROVIDER", "anthropic"))
    LLM_API_KEY: str = Field(default=os.getenv("LLM_API_KEY", ""))
    LLM_BASE_URL: Optional[str] = Field(default=os.getenv("LLM_BASE_URL") or None)
    LLM_MODEL_NAME: str = Field(default=os.getenv("LLM_MODEL_NAME", "claude-3-7-sonnet-latest"))
    # Model used for resume feedback; falls back to LLM_MODEL_NAME
    FEEDBACK_MODEL_NAME: str = Field(default=os.getenv("FEEDBACK_MODEL_NAME", ""))
    LLM_TEMPERATURE: float = Field(default=float(os.getenv("LLM_TEMPERATURE", "0.0")))
    LLM_REQUEST_TIMEOUT: int = Field(default=int(os.getenv("LLM_REQUEST_TIMEOUT", "300")))

    # Platform (identity, file storage, key-value)
    PLATFORM_BASE_URL: str = Field(default=os.getenv("PLATFORM_BASE_URL", "http://localhost:4100"))
    PLATFORM_API_TOKEN: str = Field(default=os.getenv("PLATFORM_API_TOKEN", ""))
    PLATFORM_REQUEST_TIMEOUT: float = Field(default=float(os.getenv("PLATFORM_REQUEST_TIMEOUT", "30")))
    PLATFORM_POLL_INTERVAL: float = Field(default=float(os.getenv("PLATFORM_POLL_INTERVAL", "0.1")))
    PLATFORM_READY_TIMEOUT: float = Field(default=float(os.getenv("PLATFORM_READY_TIMEOUT", "10")))
    PLATFORM_CONNECT_ATTEMPTS: int = Field(default=int(os.getenv("PLATFORM_CONNECT_ATTEMPTS", "20")))
    PLATFORM_CONNECT_BACKOFF: float = Field(default=float(os.getenv("PLATFORM_CONNECT_BACKOFF", "0.5")))

    # PDF -> PNG conversion
    PDF_RENDER_SCALE: float = Field(default=float(os.getenv("PDF_RENDER_SCALE", "4")))

    # App
    LOG_LEVEL: str = Field(default=os.getenv("LOG_LEVEL", "INFO"))
    BACKEND_CORS_ORIGINS: str = Field(default=os.getenv("BACKEND_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"))
    MAX_UPLOAD_BYTES: int = Field(default=int(os.getenv("MAX_UPLOAD_BYTES", str(20 * 1024 * 1024))))  # 20 MB


    def full_model_id(self, model_name: Optional[str] = None) -> str:
        """
        Return provider-prefixed model id for LiteLLM, e.g.:
        - 'anthropic/claude-3-7-sonnet-latest'
        - 'openai/gpt-4o-mini'
        - 'ollama/llama3.2'
        """
        name = model_name or self.LLM_MODEL_NAME
        provider = self.LLM_PROVIDER.strip().lower()
        # If already prefixed, keep as is
        if "/" in name:
            return name
        return f"{provider}/{name}"

    def feedback_model_id(self) -> str:
        return self.full_model_id(self.FEEDBACK_MODEL_NAME or None)

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.BACKEND_CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
