from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from notekeep.shared.config import settings

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "API key not configured. Please set the API_KEY environment variable."
APOLOGY_MESSAGE = "Sorry, I couldn't generate content at this time. Please try again later."

GENERATION_CONFIG = {"temperature": 0.7, "topP": 1, "topK": 32}


def build_prompt(prompt: str, existing_content: str = "") -> str:
    context = ""
    if existing_content:
        context = (
            "The current note content is:\n---\n"
            f"{existing_content}\n---\n"
            "Continue or elaborate on this.\n"
        )
    return (
        "You are a creative assistant helping a user write notes.\n"
        f'The user\'s request is: "{prompt}".\n'
        f"{context}"
        "Generate a concise and helpful response based on the request."
    )


def _first_text(data: Dict[str, Any]) -> str:
    parts = data["candidates"][0]["content"]["parts"]
    text = "".join(p.get("text") or "" for p in parts if isinstance(p, dict))
    if not text:
        raise ValueError("empty completion")
    return text


class SuggestionClient:
    """One-shot text generation against the Gemini REST API.

    Never raises: a missing key or any provider failure comes back as a
    placeholder string so note editing is never blocked.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "SuggestionClient":
        if not settings.GEMINI_API_KEY:
            logger.warning("GEMINI_API_KEY/API_KEY not set; content suggestions disabled")
        return cls(
            settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout=settings.GEMINI_TIMEOUT,
        )

    async def generate(self, prompt: str, existing_content: str = "") -> str:
        if not self.api_key:
            return MISSING_KEY_MESSAGE

        body = {
            "contents": [{"role": "user", "parts": [{"text": build_prompt(prompt, existing_content)}]}],
            "generationConfig": GENERATION_CONFIG,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/models/{self.model}:generateContent",
                    headers={"x-goog-api-key": self.api_key},
                    json=body,
                )
                response.raise_for_status()
                return _first_text(response.json())
        except Exception:
            logger.exception("Error generating content from Gemini")
            return APOLOGY_MESSAGE
