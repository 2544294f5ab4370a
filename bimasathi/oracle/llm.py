"""LLM construction and response helpers shared by the oracle clients."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable

from bimasathi.config import settings

logger = logging.getLogger(__name__)

LLMFactory = Callable[[], Any]  # Returns a langchain BaseChatModel


def default_llm_factory():
    """Create a Gemini Flash instance from environment config."""
    from langchain_google_genai import ChatGoogleGenerativeAI

    api_key = os.environ.get("GOOGLE_API_KEY") or os.environ.get("BIMASATHI_GEMINI_API_KEY")
    if not api_key:
        raise RuntimeError(
            "Gemini API key not found. Set GOOGLE_API_KEY or BIMASATHI_GEMINI_API_KEY "
            "in your environment variables."
        )

    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=api_key,
        temperature=settings.gemini_temperature,
        max_output_tokens=settings.gemini_max_output_tokens,
        response_mime_type="application/json",
    )


def response_text(response: Any) -> str:
    """Pull the text out of a chat model response."""
    content = response.content if hasattr(response, "content") else response
    if isinstance(content, list):
        # Multi-part content: keep the text parts only
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        content = "".join(parts)
    return str(content)


def load_json_payload(text: str) -> Any:
    """Decode a JSON payload, tolerating Markdown code fences around it.

    Raises ValueError on an empty or undecodable payload.
    """
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = [l for l in lines if not l.strip().startswith("```")]
        text = "\n".join(lines).strip()

    if not text:
        raise ValueError("Empty response")
    return json.loads(text)
