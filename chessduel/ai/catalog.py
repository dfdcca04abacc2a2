"""
Model catalog: list the models the provider offers, drop the ones that cannot play chess by text,
and rank the rest so the strongest candidates come first.
"""

import asyncio
from typing import Any, Optional

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from chessduel.core.config import Settings, get_settings
from chessduel.core.exceptions import CatalogError

# Human-readable classifications shown to the user when listing fails
INVALID_CREDENTIAL = "Invalid API key"
PERMISSION_PROBLEM = "API key is not allowed to list models"
RATE_LIMITED = "Too many requests, please wait"
SERVER_ERROR = "Provider server error"
CATALOG_TIMEOUT = "Loading models timed out"
GENERIC_FAILURE = "Loading models failed"

EXCLUDED_ID_MARKERS: tuple[str, ...] = (
    # image / vision
    "image",
    "vision",
    "dalle",
    "midjourney",
    "stable-diffusion",
    # embeddings
    "embed",
    # moderation
    "moderation",
    "moderate",
    # deprecated text completion variants
    "gpt-3.5-turbo-instruct",
    "text-davinci",
)
EXCLUDED_NAME_MARKERS: tuple[str, ...] = ("image", "vision")

# lower is better. The first matching row wins.
MODEL_PRIORITIES: list[tuple[int, tuple[str, ...]]] = [
    (1, ("gpt-5", "o1-preview", "o1-mini")),
    (2, ("gpt-4o", "gpt-4-turbo")),
    (3, ("claude-3-opus", "claude-3.5-sonnet")),
    (4, ("gpt-4",)),
    (5, ("claude-3-sonnet",)),
    (6, ("gemini-pro", "gemini-1.5")),
    (7, ("claude-3-haiku",)),
    (8, ("llama-3", "llama-70b", "llama-405b")),
    (9, ("mixtral", "mistral")),
    (10, ("gpt-3.5-turbo",)),
]
DEFAULT_PRIORITY = 15

DISPLAY_NAME_REPLACEMENTS: list[tuple[str, str]] = [
    ("gpt-4o", "GPT-4 Omni"),
    ("gpt-4", "GPT-4"),
    ("gpt-5", "GPT-5"),
    ("claude-3-opus", "Claude 3 Opus"),
    ("claude-3-sonnet", "Claude 3 Sonnet"),
    ("claude-3-haiku", "Claude 3 Haiku"),
    ("gemini-pro", "Gemini Pro"),
    ("llama", "Llama"),
]
MAX_DISPLAY_NAME = 50


class ModelInfo(BaseModel):
    """One catalog entry. Unknown fields sent by the provider are ignored."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: str = ""
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_entry(cls, entry: dict[str, Any]) -> "ModelInfo":
        tags: list[str] = []
        architecture = entry.get("architecture") or {}
        if isinstance(architecture.get("modality"), str):
            tags.append(architecture["modality"])
        supported = entry.get("supported_parameters") or []
        tags.extend(str(parameter) for parameter in supported)
        return cls(id=entry.get("id") or "", name=entry.get("name") or "", tags=tags)


def is_suitable(model: ModelInfo) -> bool:
    """Keep only general text models."""
    model_id = model.id.lower()
    name = model.name.lower()
    if not model_id:
        return False
    if any(marker in model_id for marker in EXCLUDED_ID_MARKERS):
        return False
    return not any(marker in name for marker in EXCLUDED_NAME_MARKERS)


def model_priority(model: ModelInfo) -> int:
    model_id = model.id.lower()
    for priority, markers in MODEL_PRIORITIES:
        if any(marker in model_id for marker in markers):
            return priority
    return DEFAULT_PRIORITY


def filter_and_rank(models: list[ModelInfo]) -> list[ModelInfo]:
    suitable = [model for model in models if is_suitable(model)]
    logger.debug("{} of {} models are suitable", len(suitable), len(models))
    return sorted(suitable, key=lambda model: (model_priority(model), model.id))


def format_model_name(model: ModelInfo) -> str:
    """A more readable name for dropdowns. Long names get cut at 50 characters."""
    name = model.name or model.id
    for pattern, replacement in DISPLAY_NAME_REPLACEMENTS:
        name = _replace_case_insensitive(name, pattern, replacement)
    if len(name) > MAX_DISPLAY_NAME:
        name = name[: MAX_DISPLAY_NAME - 3] + "..."
    return name


def _replace_case_insensitive(text: str, pattern: str, replacement: str) -> str:
    lowered = text.lower()
    result: list[str] = []
    start = 0
    while (idx := lowered.find(pattern, start)) != -1:
        result.append(text[start:idx])
        result.append(replacement)
        start = idx + len(pattern)
    result.append(text[start:])
    return "".join(result)


def classify_failure(status_code: int) -> str:
    if status_code == 401:
        return INVALID_CREDENTIAL
    if status_code == 403:
        return PERMISSION_PROBLEM
    if status_code == 429:
        return RATE_LIMITED
    if status_code >= 500:
        return SERVER_ERROR
    return GENERIC_FAILURE


def next_page_url(payload: Any) -> Optional[str]:
    """Providers differ in where they put the link to the next page."""
    if not isinstance(payload, dict):
        return None
    links = payload.get("links") if isinstance(payload.get("links"), dict) else {}
    meta = payload.get("meta") if isinstance(payload.get("meta"), dict) else {}
    return payload.get("next") or links.get("next") or meta.get("next") or None


def page_items(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    if isinstance(payload, list):
        return payload
    return []


class ModelCatalog:
    """Paginated listing of `GET {api_base_url}/models`."""

    def __init__(
        self,
        api_key: str,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.settings = settings or get_settings()
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": self.settings.app_referer,
            "X-Title": self.settings.app_title,
            "Accept": "application/json",
        }

    async def fetch_models(self) -> list[ModelInfo]:
        """
        Fetch pages until there is no next page (or the page guard is hit), then filter and rank.

        Raises CatalogError with a classification meant for the user.
        """
        url: Optional[str] = f"{self.settings.api_base_url.rstrip('/')}/models"
        entries: list[dict[str, Any]] = []
        pages = 0

        async with httpx.AsyncClient(
            headers=self._headers(),
            timeout=self.settings.catalog_timeout_s,
            transport=self._transport,
        ) as client:
            while url and pages < self.settings.catalog_page_guard:
                logger.debug("Loading model page {}", pages + 1)
                payload = await self._get_page(client, url)
                items = page_items(payload)
                entries.extend(item for item in items if isinstance(item, dict))
                pages += 1

                url = next_page_url(payload)
                if url:
                    await asyncio.sleep(self.settings.catalog_page_delay_s)

        models = filter_and_rank([ModelInfo.from_entry(entry) for entry in entries])
        logger.info(
            "Loaded {} models over {} page(s), {} suitable", len(entries), pages, len(models)
        )
        return models

    async def _get_page(self, client: httpx.AsyncClient, url: str) -> Any:
        try:
            response = await client.get(url)
        except httpx.TimeoutException as exc:
            raise CatalogError(CATALOG_TIMEOUT, str(exc)) from exc
        except httpx.HTTPError as exc:
            raise CatalogError(GENERIC_FAILURE, str(exc)) from exc

        if response.is_error:
            classification = classify_failure(response.status_code)
            logger.warning(
                "Model listing failed: {} ({})", classification, response.status_code
            )
            raise CatalogError(
                classification, f"{response.status_code} - {response.text[:100]}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise CatalogError(GENERIC_FAILURE, "response is not JSON") from exc
