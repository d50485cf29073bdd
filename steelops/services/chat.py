from __future__ import annotations

from typing import List, Literal, Optional

import requests
from pydantic import BaseModel

from steelops.config import get_config
from steelops.errors import ChatError
from steelops.logging import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = "You are a helpful assistant for RINL steel plant operations."
GREETING = "Hello! How can I help you with RINL steel plant operations today?"


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatClient:
    """Client for an OpenAI-compatible chat completions endpoint (Groq by default)."""

    def __init__(self, api_url: str, api_key: Optional[str], model: str,
                 temperature: float = 0.7, timeout: float = 30.0) -> None:
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def reply(self, history: List[ChatMessage]) -> str:
        """Send the whole conversation and return the assistant's answer."""
        if not self.api_key:
            raise ChatError("Chat assistant is not configured. Set CHAT_API_KEY to enable it.")
        payload = {
            "model": self.model,
            "messages": [{"role": "system", "content": SYSTEM_PROMPT}]
            + [m.model_dump() for m in history],
            "temperature": self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            r = requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Chat API error: {e}")
            raise ChatError(str(e)) from e

        if not r.ok:
            error = _body(r).get("error")
            message = (error.get("message") if isinstance(error, dict) else None) or r.reason
            logger.error(f"Chat API error ({r.status_code}): {message}")
            raise ChatError(message)

        body = _body(r)
        if not body:
            logger.error(f"Chat API returned an unreadable body ({r.status_code})")
            raise ChatError("Chat service returned an invalid response.")
        choices = body.get("choices") or []
        content = choices[0].get("message", {}).get("content") if choices else None
        if not content:
            raise ChatError("No reply from AI.")
        return content


def _body(r) -> dict:
    try:
        body = r.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def get_chat_client() -> ChatClient:
    config = get_config()
    return ChatClient(
        api_url=config.chat_api_url,
        api_key=config.chat_api_key,
        model=config.chat_model,
        temperature=config.chat_temperature,
        timeout=config.http_timeout_seconds,
    )
