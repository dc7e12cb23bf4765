"""LLM completion endpoint configuration."""

import os
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."


class LLMSettings(BaseModel):
    """Settings for the OpenAI-compatible chat completions endpoint."""

    api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    api_key: Optional[str] = None
    chat_model: str = "openai/gpt-4"
    title_model: str = "openai/gpt-4"
    timeout_seconds: float = Field(default=60.0, gt=0)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    site_url: str = "https://freechat.app"
    site_name: str = "FreeChat"

    @classmethod
    def from_env(cls) -> "LLMSettings":
        """Build settings from environment variables (and .env)."""
        api_key = os.getenv("OPEN_ROUTER_API_KEY")
        chat_model = os.getenv("CHAT_MODEL", "openai/gpt-4")
        return cls(
            api_url=os.getenv("LLM_API_URL", cls.model_fields["api_url"].default),
            api_key=api_key.strip() if api_key else None,
            chat_model=chat_model,
            title_model=os.getenv("TITLE_MODEL", chat_model),
            timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "60")),
            system_prompt=os.getenv("DEFAULT_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT),
            site_url=os.getenv("SITE_URL", "https://freechat.app"),
            site_name=os.getenv("SITE_NAME", "FreeChat"),
        )
