"""
Completion client over an OpenAI-compatible chat completions endpoint (OpenRouter by default; configurable base URL).

One request, one answer: retrying is the move adapter's job, so the SDK's own retries are switched off.
Every failure comes out as a CompletionError with a `reason` the adapter can log and feed back.
"""

import asyncio
from typing import Any, Optional

import openai
from loguru import logger
from openai import AsyncOpenAI

from chessduel.core.config import Settings, get_settings
from chessduel.core.exceptions import CompletionError

# reason codes
UNAUTHORIZED = "unauthorized"
FORBIDDEN = "forbidden"
INSUFFICIENT_CREDITS = "insufficient_credits"
NOT_FOUND = "model_not_found"
RATE_LIMITED = "rate_limited"
SERVER_ERROR = "server_error"
TIMEOUT = "timeout"
CONNECTION = "connection"
BAD_STATUS = "bad_status"
EMPTY_RESPONSE = "empty_response"
BAD_RESPONSE = "bad_response"

STATUS_REASONS: dict[int, str] = {
    401: UNAUTHORIZED,
    402: INSUFFICIENT_CREDITS,
    403: FORBIDDEN,
    404: NOT_FOUND,
    429: RATE_LIMITED,
}


def build_client(api_key: str, settings: Optional[Settings] = None) -> AsyncOpenAI:
    settings = settings or get_settings()
    return AsyncOpenAI(
        api_key=api_key,
        base_url=settings.api_base_url,
        timeout=settings.request_timeout_s,
        max_retries=0,
        default_headers={
            "HTTP-Referer": settings.app_referer,
            "X-Title": settings.app_title,
        },
    )


def classify_status(status_code: int) -> str:
    if status_code >= 500:
        return SERVER_ERROR
    return STATUS_REASONS.get(status_code, BAD_STATUS)


class CompletionClient:
    """Bound to one credential and one model (one side of the board)."""

    def __init__(
        self,
        api_key: str,
        model: str,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.model = model
        self.settings = settings or get_settings()
        self._client = client or build_client(api_key, self.settings)

    async def complete(self, system: str, prompt: str) -> str:
        """Send one system + user message, return the generated text."""
        timeout = self.settings.request_timeout_s
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": prompt},
                    ],
                    max_tokens=self.settings.max_tokens,
                    temperature=self.settings.temperature,
                    top_p=self.settings.top_p,
                ),
                # a little slack so the SDK's own timeout normally fires first
                timeout=timeout + 1.0,
            )
        except (asyncio.TimeoutError, openai.APITimeoutError) as exc:
            raise CompletionError(
                TIMEOUT, f"{self.model} did not answer within {timeout:.0f}s"
            ) from exc
        except openai.APIStatusError as exc:
            reason = classify_status(exc.status_code)
            raise CompletionError(
                reason, f"{reason} ({exc.status_code}): {str(exc)[:100]}", exc.status_code
            ) from exc
        except openai.APIConnectionError as exc:
            raise CompletionError(CONNECTION, str(exc)) from exc
        except (openai.APIError, ValueError) as exc:
            # 200 with a body that is not a chat completion (HTML error page, truncated JSON, ...)
            raise CompletionError(
                BAD_RESPONSE, f"{self.model} sent a malformed response: {str(exc)[:100]}"
            ) from exc

        text = extract_text(response).strip()
        if not text:
            logger.debug("Empty completion from {}: {!r}", self.model, response)
            raise CompletionError(EMPTY_RESPONSE, f"{self.model} returned no content")
        return text


def extract_text(response: Any) -> str:
    """Content of the first choice. Some providers send a list of content parts instead of a string."""
    choices = getattr(response, "choices", None)
    if not choices:
        return ""
    content = getattr(choices[0].message, "content", None)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for part in content:
            if isinstance(part, dict):
                if part.get("type") == "text" and isinstance(part.get("text"), str):
                    parts.append(part["text"])
            elif isinstance(getattr(part, "text", None), str):
                parts.append(part.text)
        return "\n".join(parts)
    return ""
