import datetime
import email.utils
import json
import logging
import math
import re
from typing import Any, Dict, Optional

import httpx

from resume_analyzer.exceptions import LLMNotConfigured, LLMRequestError, RateLimitError

logger = logging.getLogger(__name__)


def clean_llm_output(text: str) -> str:
    """Removes markdown-style ```json and ``` from model output."""
    text = re.sub(r"^```(?:json)?\s*", "", (text or "").strip())
    text = re.sub(r"\s*```$", "", text.strip())
    return text.strip()


def parse_json_object(text: str) -> Dict[str, Any]:
    """
    Parses a model reply that should be a single JSON object.
    Falls back to the outermost {...} block when the model wrapped the
    object in prose. Raises ValueError when no object can be read.
    """
    cleaned = clean_llm_output(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        block = re.search(r"\{.*\}", cleaned, re.DOTALL)
        if not block:
            raise
        parsed = json.loads(block.group(0))
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Retry-After is either delta-seconds or an HTTP date."""
    if not value:
        return None
    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        return max(0.0, seconds) if math.isfinite(seconds) else None
    try:
        when = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=datetime.timezone.utc)
    now = datetime.datetime.now(datetime.timezone.utc)
    return max(0.0, (when - now).total_seconds())


class LLMClient:
    """Chat completions against an OpenAI-compatible endpoint, one call per stage."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: Optional[str],
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        timeout: float = 60.0,
    ):
        self.http_client = http_client
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def complete(self, prompt: str, temperature: float, max_tokens: int) -> str:
        if not self.configured:
            raise LLMNotConfigured("LLM API key is not configured.")

        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        try:
            response = await self.http_client.post(
                f"{self.base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise LLMRequestError(f"LLM request failed: {e}") from e

        if response.status_code == 429:
            raise RateLimitError(
                "LLM rate limit reached",
                retry_after=parse_retry_after(response.headers.get("retry-after")),
                body=response.text,
            )
        if not response.is_success:
            raise LLMRequestError(
                f"LLM API error ({response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMRequestError(f"Unexpected LLM response shape: {e}") from e
        logger.debug("LLM reply (preview): %s", (content or "")[:200])
        return content or ""
