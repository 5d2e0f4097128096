from __future__ import annotations

from typing import Optional, Protocol

import structlog
from openai import OpenAI, OpenAIError

from app import config
from app.errors import ModelUnavailable

logger = structlog.get_logger()


class TextModelClient(Protocol):
    """Anything that turns a prompt into raw completion text or raises"""

    def generate(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        ...


class OpenAIModelClient:
    def __init__(
        self,
        api_key: str,
        model: str = config.OPENAI_MODEL,
        timeout: float = config.OPENAI_TIMEOUT_SECONDS,
        temperature: float = config.OPENAI_TEMPERATURE,
    ) -> None:
        if not api_key:
            raise ModelUnavailable("OPENAI_API_KEY not set")
        self.model = model
        self.temperature = temperature
        # Timeout applies to every request made through this handle
        self._client = OpenAI(api_key=api_key).with_options(timeout=timeout)

    def generate(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        try:
            rsp = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            raise ModelUnavailable(f"{type(e).__name__}: {e}") from e
        if not rsp.choices:
            raise ModelUnavailable("Model returned no choices")
        return (rsp.choices[0].message.content or "").strip()


def build_model_client(api_key: Optional[str] = None) -> Optional[TextModelClient]:
    """Return a configured client, or None to run in fallback-only mode"""
    key = api_key if api_key is not None else config.OPENAI_API_KEY
    if not key:
        logger.info("model_client_disabled", reason="OPENAI_API_KEY not set")
        return None
    logger.info("model_client_configured", model=config.OPENAI_MODEL)
    return OpenAIModelClient(key)


def clean_json_like(content: str, opening: str = "[") -> str:
    closing = "]" if opening == "[" else "}"
    # Strip common code fences ```json ... ``` or ``` ... ```
    text = content.strip()
    if text.startswith("```"):
        first_nl = text.find("\n")
        if first_nl != -1:
            text = text[first_nl + 1 :]
        if text.endswith("```"):
            text = text[:-3]
    start = text.find(opening)
    end = text.rfind(closing)
    if start != -1 and end != -1 and end > start:
        return text[start : end + 1]
    return text.strip()
